# src/core/materializer.py
from typing import Any, Callable, Dict, Optional

from .errors import MaterializationError, StoreConnectionError
from .scratch import ScratchArena
from .store_interfaces import IGraphStore
from src.logger_setup import get_logger
from src.models.condense_models import MaterializationReport

logger = get_logger(__name__)

GROUP_LABEL_PURPOSE = "grp"
GROUP_KEY_PREFIX = "group"


class SupergraphMaterializer:
    """
    Turns any node -> group assignment into SuperNodes, memberships and
    aggregated super-edges for one (run, candidate).

    After `materialize` returns, every original node has exactly one membership
    for that (run, candidate): nodes the assignment left out get a singleton
    SuperNode keyed by their own id.
    """

    def __init__(self, store: IGraphStore):
        self.store = store

    def _step(self, candidate: str, step: str, fn: Callable[..., Any], *args) -> Any:
        """Runs one atomic store operation, tagging failures with the step name."""
        try:
            return fn(*args)
        except StoreConnectionError:
            raise
        except Exception as e:
            raise MaterializationError(candidate, step, str(e)) from e

    def cleanup(self, run_id: str, candidate: str) -> int:
        """Removes every SuperNode (and dependent links) of (run_id, candidate)."""
        deleted = self._step(candidate, "cleanup", self.store.delete_super_nodes, run_id, candidate)
        if deleted:
            logger.debug(f"Removed {deleted} stale SuperNodes for run {run_id}, candidate '{candidate}'.")
        return deleted

    def materialize(self, run_id: str, candidate: str, assignment: Dict[str, Any],
                    arena: Optional[ScratchArena] = None) -> MaterializationReport:
        """
        Builds the supergraph of one candidate.

        Args:
            run_id (str): Run identifier the artifacts are tagged with.
            candidate (str): Candidate label the artifacts are tagged with.
            assignment (Dict[str, Any]): node id -> group key. Keys are stringified;
                                         nodes may be missing.
            arena (Optional[ScratchArena]): Arena for the temporary group label.
                                            A private one is used (and released) if None.

        Returns:
            MaterializationReport: Counts for the cost model.

        Raises:
            MaterializationError: If a store write fails. Artifacts already written
                                  for the candidate stay until the next cleanup.
        """
        self.cleanup(run_id, candidate)

        if arena is None:
            with ScratchArena(self.store, run_id, candidate) as own_arena:
                return self._build(run_id, candidate, assignment, own_arena)
        # The caller releases its arena, group label included
        return self._build(run_id, candidate, assignment, arena)

    def _namespace_keys(self, candidate: str, values: Dict[str, str]) -> Dict[str, str]:
        """
        Renames group keys equal to the id of a node the assignment leaves out.

        Such a node gets a singleton SuperNode keyed by its own id during
        fallback, so the group would otherwise clash with it.
        """
        unassigned = set(self._step(candidate, "assign", self.store.node_ids)) - set(values)
        clashing = {key for key in set(values.values()) if key in unassigned}
        if not clashing:
            return values

        taken = unassigned | set(values.values())
        renamed: Dict[str, str] = {}
        for key in clashing:
            new_key = f"{GROUP_KEY_PREFIX}:{key}"
            while new_key in taken:
                new_key = f"{GROUP_KEY_PREFIX}:{new_key}"
            taken.add(new_key)
            renamed[key] = new_key
        logger.warning(f"Candidate '{candidate}': {len(renamed)} group keys collide with unassigned node ids; "
                       f"renamed with prefix '{GROUP_KEY_PREFIX}:'.")
        return {node: renamed.get(key, key) for node, key in values.items()}

    def _build(self, run_id: str, candidate: str, assignment: Dict[str, Any], arena: ScratchArena) -> MaterializationReport:
        group_label = arena.label(GROUP_LABEL_PURPOSE)
        values = {str(node): str(key) for node, key in assignment.items() if key is not None}
        values = self._namespace_keys(candidate, values)

        # A crashed earlier attempt of the same (run, candidate) may have left the label behind
        self._step(candidate, "assign", self.store.remove_node_property, group_label)
        written = self._step(candidate, "assign", self.store.write_node_property, group_label, values)
        if written < len(values):
            logger.warning(f"Candidate '{candidate}': {len(values) - written} assigned node ids are not in the graph and were ignored.")

        groups = self._step(candidate, "group", self.store.create_groups_from_property, run_id, candidate, group_label)
        pre_fallback_covered = self._step(candidate, "coverage", self.store.count_edges_with_property, group_label)

        singletons = self._step(candidate, "fallback", self.store.add_singletons_for_uncovered, run_id, candidate)
        if singletons:
            logger.debug(f"Candidate '{candidate}': coverage fallback created {singletons} singleton SuperNodes.")

        self._step(candidate, "super_edges", self.store.create_super_edges, run_id, candidate)

        report = MaterializationReport(
            super_nodes=self._step(candidate, "count", self.store.count_super_nodes, run_id, candidate),
            super_edges=self._step(candidate, "count", self.store.count_super_edges, run_id, candidate),
            internal_edges=self._step(candidate, "count", self.store.count_internal_edges, run_id, candidate),
            covered_edges=self._step(candidate, "count", self.store.count_covered_edges, run_id, candidate),
            pre_fallback_covered_edges=pre_fallback_covered,
            assigned_nodes=written,
            singleton_nodes=singletons,
        )
        logger.info(f"Materialized '{candidate}': {groups} groups + {singletons} singletons, "
                    f"{report.super_edges} super-edges, {report.internal_edges} internal edges.")
        return report

    def retire(self, run_id: str, keep: Optional[str] = None) -> int:
        """
        Deletes a run's artifacts. With keep, the named candidate survives and
        every other candidate of the run is removed.
        """
        deleted = self.store.delete_super_nodes(run_id, keep_candidate=keep)
        if keep:
            logger.info(f"Retired {deleted} SuperNodes of run {run_id}; kept candidate '{keep}'.")
        else:
            logger.info(f"Discarded all {deleted} SuperNodes of run {run_id}.")
        return deleted

    def purge_run(self, run_id: str) -> int:
        """Removes every artifact of a run, e.g. one orphaned by a crash."""
        return self.retire(run_id)
