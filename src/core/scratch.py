# src/core/scratch.py
import hashlib
from typing import List

from .store_interfaces import IGraphStore
from src.logger_setup import get_logger

logger = get_logger(__name__)

SCRATCH_PREFIX = "tmp"
SUFFIX_LENGTH = 8


def short_suffix(run_id: str, candidate: str) -> str:
    """Short hex digest of (run_id, candidate), used to namespace scratch labels."""
    digest = hashlib.sha1(f"{run_id}:{candidate}".encode("utf-8")).hexdigest()
    return digest[:SUFFIX_LENGTH]


class ScratchArena:
    """
    Per-(run, candidate) arena of temporary node properties.

    Every label handed out by `label()` is removed from the store when the
    arena is released, whether the block it guards succeeded or raised.

    Usage:
        with ScratchArena(store, run_id, "louvain") as arena:
            prop = arena.label("lbl")
            ...
    """

    def __init__(self, store: IGraphStore, run_id: str, candidate: str):
        self.store = store
        self.run_id = run_id
        self.candidate = candidate
        self.suffix = short_suffix(run_id, candidate)
        self._labels: List[str] = []

    def label(self, purpose: str) -> str:
        """Returns the scratch property name for purpose, registering it for cleanup."""
        name = f"{SCRATCH_PREFIX}_{purpose}_{self.suffix}"
        if name not in self._labels:
            self._labels.append(name)
        return name

    @property
    def labels(self) -> List[str]:
        return list(self._labels)

    def release(self) -> int:
        """Removes every registered label from the store. Returns the number of node properties removed."""
        removed = 0
        while self._labels:
            name = self._labels[-1]
            removed += self.store.remove_node_property(name)
            self._labels.pop()
        if removed:
            logger.debug(f"Released scratch labels for '{self.candidate}' (suffix {self.suffix}): {removed} node properties removed.")
        return removed

    def __enter__(self) -> "ScratchArena":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.release()
            return False
        # The block already failed; a cleanup error must not hide the original one
        try:
            self.release()
        except Exception as cleanup_error:
            logger.error(f"Failed to release scratch labels {self._labels} for '{self.candidate}': {cleanup_error}", exc_info=True)
        return False
