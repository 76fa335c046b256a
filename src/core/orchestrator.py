# src/core/orchestrator.py
import uuid
from typing import Any, Dict, List, Optional, Union

from . import cost_model
from .errors import NoViableCandidateError, StoreConnectionError
from .materializer import SupergraphMaterializer
from .scratch import ScratchArena
from .state_manager import RunStateManager
from .store_interfaces import IGraphStore, IPartitionOracle
from src.logger_setup import get_logger
from src.models.condense_models import CandidateResult, CandidateStatus, CondenseOptions, RunReport
from src.partitioning.base_partitioner import BasePartitioner
from src.partitioning.registry import resolve_partitioners

logger = get_logger(__name__)


class CondensationOrchestrator:
    """
    Runs the candidate strategies against one graph, scores each materialized
    supergraph, keeps the cheapest and retires the rest.

    Candidates are evaluated one after another. A failing candidate is scored
    `inf` and the run goes on; only a lost store connection aborts the run.
    """

    def __init__(self,
                 store: IGraphStore,
                 oracle: Optional[IPartitionOracle] = None,
                 options: Optional[CondenseOptions] = None,
                 state_manager: Optional[RunStateManager] = None,
                 materializer: Optional[SupergraphMaterializer] = None):
        """
        Args:
            store (IGraphStore): Shared graph store holding the original graph.
            oracle (Optional[IPartitionOracle]): Needed by oracle-backed candidates only.
            options (Optional[CondenseOptions]): Run options. Defaults come from config.
            state_manager (Optional[RunStateManager]): Status tracking. In-memory if None.
            materializer (Optional[SupergraphMaterializer]): Defaults to one over store.
        """
        self.store = store
        self.oracle = oracle
        self.options = options or CondenseOptions()
        self.state_manager = state_manager or RunStateManager()
        self.materializer = materializer or SupergraphMaterializer(store)

    def run(self, graph_handle: str) -> RunReport:
        """
        Evaluates every requested candidate on graph_handle.

        Returns:
            RunReport: One result per recognized request (repeats included), in request order, and the winner.

        Raises:
            StoreConnectionError: If the store becomes unreachable. The run is
                                  marked failed; its artifacts may need a purge.
        """
        run_id = str(uuid.uuid4())
        original_nodes = self.store.count_nodes()
        original_edges = self.store.count_edges()
        requests = resolve_partitioners(self.options, self.oracle)
        logger.info(f"Run {run_id} on '{graph_handle}': {original_nodes} nodes, {original_edges} edges, "
                    f"candidates {[name for name, _ in requests]}.")

        report = RunReport(
            run_id=run_id,
            graph_handle=graph_handle,
            original_node_count=original_nodes,
            original_edge_count=original_edges,
        )
        self.state_manager.start_run(run_id, graph_handle, [p.name for _, p in requests],
                                     requested=[name for name, _ in requests])

        try:
            evaluated: Dict[str, CandidateResult] = {}
            for requested, partitioner in requests:
                if partitioner.name not in evaluated:
                    evaluated[partitioner.name] = self._evaluate(
                        run_id, graph_handle, partitioner, original_nodes, original_edges
                    )
                # One row per request; a repeated name reports the shared result under its own spelling
                report.results.append(evaluated[partitioner.name].model_copy(update={"candidate": requested}))

            report.winner = cost_model.select_winner(report.results)
            if report.winner is None and report.results:
                logger.warning(str(NoViableCandidateError(run_id, [r.candidate for r in report.results])))

            report.persisted = self._retire(run_id, report.winner)
            if self.options.drop_graph:
                self._drop_graph(graph_handle)
        except StoreConnectionError as e:
            logger.critical(f"Run {run_id} aborted: graph store unreachable: {e}", exc_info=True)
            self.state_manager.finish_run(run_id, 'failed', error=str(e))
            raise

        self.state_manager.finish_run(run_id, 'completed', winner=report.winner)
        logger.info(f"Run {run_id} finished. Winner: {report.winner or 'none'} (persisted: {report.persisted}).")
        return report

    def _evaluate(self, run_id: str, graph_handle: str, partitioner: BasePartitioner,
                  original_nodes: int, original_edges: int) -> CandidateResult:
        """Partitions, materializes and scores one candidate, containing any non-fatal failure."""
        name = partitioner.name
        logger.info(f"Candidate '{name}': building.")
        self.state_manager.update_candidate(run_id, name, CandidateStatus.BUILDING.value)

        try:
            with ScratchArena(self.store, run_id, name) as arena:
                assignment = partitioner.partition(self.store, graph_handle, arena)
                materialized = self.materializer.materialize(run_id, name, assignment, arena)
        except StoreConnectionError:
            raise
        except Exception as e:
            logger.error(f"Candidate '{name}' failed: {e}", exc_info=True)
            self.state_manager.update_candidate(run_id, name, CandidateStatus.FAILED.value, error=str(e))
            return CandidateResult(
                candidate=name,
                compression_ratio=cost_model.compression_ratio(0, 0, original_nodes, original_edges),
                status=CandidateStatus.FAILED,
                error=str(e),
            )

        score = cost_model.score_report(materialized, original_edges, self.options.error_mode)
        result = CandidateResult(
            candidate=name,
            score=score,
            super_node_count=materialized.super_nodes,
            super_edge_count=materialized.super_edges,
            compression_ratio=cost_model.compression_ratio(
                materialized.super_nodes, materialized.super_edges, original_nodes, original_edges
            ),
            status=CandidateStatus.SCORED,
        )
        logger.info(f"Candidate '{name}': scored {score} ({result.super_node_count} super-nodes, "
                    f"{result.super_edge_count} super-edges, ratio {result.compression_ratio:.3f}).")
        self.state_manager.update_candidate(run_id, name, CandidateStatus.SCORED.value, score=score)
        return result

    def _retire(self, run_id: str, winner: Optional[str]) -> bool:
        """Keeps the winner's artifacts when writing, discards everything else. Returns whether the winner was kept."""
        keep = winner if self.options.write else None
        try:
            self.materializer.retire(run_id, keep=keep)
        except StoreConnectionError:
            raise
        except Exception as e:
            logger.error(f"Retiring artifacts of run {run_id} failed: {e}. Purge the run to remove leftovers.", exc_info=True)
            return False
        return keep is not None

    def _drop_graph(self, graph_handle: str):
        if self.oracle is None:
            logger.warning(f"dropGraph requested but no partition oracle is configured; '{graph_handle}' left as is.")
            return
        try:
            self.oracle.drop_graph(graph_handle)
        except StoreConnectionError:
            raise
        except Exception as e:
            logger.error(f"Dropping graph projection '{graph_handle}' failed: {e}", exc_info=True)


def condense(store: IGraphStore,
             oracle: Optional[IPartitionOracle],
             graph_handle: str,
             config: Union[CondenseOptions, Dict[str, Any], None] = None,
             state_manager: Optional[RunStateManager] = None) -> List[Dict[str, Any]]:
    """
    Runs one condensation and returns its result rows.

    Args:
        store (IGraphStore): The graph store.
        oracle (Optional[IPartitionOracle]): The partition oracle.
        graph_handle (str): Graph projection name known to the oracle.
        config (Union[CondenseOptions, Dict[str, Any], None]): Options bag, camelCase keys
                                                              (e.g. {"candidates": ["stars"], "kValue": 2}).
        state_manager (Optional[RunStateManager]): Status tracking.

    Returns:
        List[Dict[str, Any]]: {candidate, score, superNodeCount, superEdgeCount, compressionRatio}
                              per recognized candidate, in request order.
    """
    options = config if isinstance(config, CondenseOptions) else CondenseOptions.model_validate(config or {})
    orchestrator = CondensationOrchestrator(store, oracle, options, state_manager)
    return orchestrator.run(graph_handle).rows()
