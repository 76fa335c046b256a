# src/main.py
import json
import sys

import fire

from src.logger_setup import setup_logging, get_logger
import src.config as config
from src.core.errors import CondenseError, StoreConnectionError
from src.core.materializer import SupergraphMaterializer
from src.core.orchestrator import CondensationOrchestrator
from src.core.state_manager import RunStateManager
from src.core.store_interfaces import IGraphStore, IPartitionOracle
from src.models.condense_models import CondenseOptions
from src.partitioning.registry import KNOWN_CANDIDATES

# Setup logging at the very beginning
setup_logging()
logger = get_logger(__name__)


class CondenseCLI:
    """
    Graph condensation CLI using Python Fire.

    Evaluates grouping strategies on a graph, keeps the supergraph with the
    lowest description cost and reports every candidate's score.
    """

    def _open_backend(self, backend: str, edge_list=None) -> tuple[IGraphStore, IPartitionOracle]:
        """Creates the store and oracle pair for a backend name."""
        if backend == "memory":
            from src.oracles.networkx_oracle import NetworkXOracle
            from src.stores.memory_store import MemoryGraphStore
            if not edge_list:
                logger.error("The memory backend needs --edge-list=PATH.")
                sys.exit(2)
            store = MemoryGraphStore.from_edge_list(edge_list)
            return store, NetworkXOracle(store)
        if backend == "neo4j":
            from src.oracles.gds_oracle import GdsOracle
            from src.stores.neo4j_store import Neo4jGraphStore
            store = Neo4jGraphStore.from_config()
            return store, GdsOracle(store)
        logger.error(f"Unknown backend '{backend}'. Use 'neo4j' or 'memory'.")
        sys.exit(2)

    def run(self, graph_handle: str, candidates=None, degree_threshold=None, k_value=None,
            write=None, drop_graph=None, error_mode=None, backend="neo4j", edge_list=None,
            state_dir=None):
        """
        Evaluate candidates on a graph and print one JSON row per candidate.

        Args:
            graph_handle (str): Graph projection name (a GDS graph name for neo4j).
            candidates (str | tuple[str], optional): Strategies in order, e.g. --candidates=stars,chains.
                                                     Defaults to config.
            degree_threshold (int, optional): Hub threshold for 'stars'. Defaults to config.
            k_value (int, optional): Minimum core number for 'kcore'. Defaults to config.
            write (bool, optional): Keep the winner's supergraph. Defaults to config.
            drop_graph (bool, optional): Drop the projection afterwards. Defaults to config.
            error_mode (str, optional): 'post_fallback' or 'pre_fallback'. Defaults to config.
            backend (str): 'neo4j' (Cypher + GDS) or 'memory' (networkx). Defaults to 'neo4j'.
            edge_list (str, optional): Whitespace-separated edge list file, memory backend only.
            state_dir (str, optional): Where run state is saved. Defaults to config.
        """
        overrides = {
            "candidates": candidates,
            "degreeThreshold": degree_threshold,
            "kValue": k_value,
            "write": write,
            "dropGraph": drop_graph,
            "errorMode": error_mode,
        }
        try:
            options = CondenseOptions.model_validate({k: v for k, v in overrides.items() if v is not None})
        except ValueError as e:
            logger.error(f"Invalid options: {e}")
            sys.exit(2)

        logger.info(f"Executing run on '{graph_handle}' with backend '{backend}'...")
        try:
            store, oracle = self._open_backend(backend, edge_list)
            try:
                state_manager = RunStateManager(state_dir or config.STATE_DIR)
                report = CondensationOrchestrator(store, oracle, options, state_manager).run(graph_handle)
            finally:
                store.close()
        except StoreConnectionError as e:
            logger.error(f"Graph store unreachable: {e}")
            sys.exit(1)
        except CondenseError as e:
            logger.error(f"An error occurred executing command 'run': {e}", exc_info=True)
            sys.exit(1)

        print(json.dumps({"runId": report.run_id, "winner": report.winner, "results": report.rows()}, indent=2))

    def purge(self, run_id: str, state_dir=None):
        """
        Remove every SuperNode, membership and super-edge of a run from Neo4j.

        Args:
            run_id (str): The run to purge (see `runs`).
            state_dir (str, optional): State directory to update. Defaults to config.
        """
        logger.info(f"Executing purge of run {run_id}...")
        try:
            store, _ = self._open_backend("neo4j")
            try:
                deleted = SupergraphMaterializer(store).purge_run(run_id)
            finally:
                store.close()
        except StoreConnectionError as e:
            logger.error(f"Graph store unreachable: {e}")
            sys.exit(1)
        RunStateManager(state_dir or config.STATE_DIR).mark_purged(run_id)
        print(json.dumps({"runId": run_id, "deletedSuperNodes": deleted}))

    def runs(self, state_dir=None):
        """
        List runs that still have artifacts in Neo4j, plus runs that never finished.

        Args:
            state_dir (str, optional): State directory to read. Defaults to config.
        """
        try:
            store, _ = self._open_backend("neo4j")
            try:
                persisted = store.list_runs()
            finally:
                store.close()
        except StoreConnectionError as e:
            logger.error(f"Graph store unreachable: {e}")
            sys.exit(1)
        incomplete = RunStateManager(state_dir or config.STATE_DIR).get_incomplete_runs()
        print(json.dumps({"persisted": persisted, "incomplete": incomplete}, indent=2))

    def candidates(self):
        """List the recognized candidate names."""
        print(json.dumps(KNOWN_CANDIDATES))


def main():
    fire.Fire(CondenseCLI)


if __name__ == "__main__":
    logger.info("Starting graph condensation CLI (using Fire)...")
    main()
    logger.info("CLI finished.")
