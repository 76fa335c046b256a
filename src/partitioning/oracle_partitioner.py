# src/partitioning/oracle_partitioner.py
from typing import Any, Dict, Optional

from .base_partitioner import BasePartitioner
from src.core.errors import OracleError
from src.core.scratch import ScratchArena
from src.core.store_interfaces import IGraphStore, IPartitionOracle
from src.logger_setup import get_logger

logger = get_logger(__name__)

LABEL_PURPOSE = "lbl"

class OraclePartitioner(BasePartitioner):
    """
    Delegates grouping to the partition oracle (community detection,
    connectivity, k-core). The oracle writes one label per node into a scratch
    property; the labels, prefixed with the algorithm name, become group keys.
    """

    def __init__(self,
                 name: str,
                 algorithm: str,
                 oracle: Optional[IPartitionOracle],
                 params: Optional[Dict[str, Any]] = None):
        super().__init__(name)
        self.algorithm = algorithm
        self.oracle = oracle
        self.params = dict(params or {})

    def partition(self,
                  store: IGraphStore,
                  graph_handle: str,
                  arena: ScratchArena) -> Dict[str, str]:
        """
        Args:
            store (IGraphStore): Store the oracle writes its labels into.
            graph_handle (str): Graph projection name forwarded to the oracle.
            arena (ScratchArena): Provides the scratch property for the labels.

        Returns:
            Dict[str, str]: node id -> "<algorithm>:<label>".

        Raises:
            OracleError: If no oracle is configured or the computation fails.
        """
        if self.oracle is None:
            raise OracleError(self.algorithm, "no partition oracle configured")

        label_prop = arena.label(LABEL_PURPOSE)
        logger.info(f"'{self.name}': delegating '{self.algorithm}' on graph '{graph_handle}' to {self.oracle.__class__.__name__} (params: {self.params}).")
        labelled = self.oracle.compute_labels(graph_handle, self.algorithm, self.params, label_prop)

        labels = store.read_node_property(label_prop)
        logger.debug(f"'{self.name}': oracle labelled {labelled} nodes; read back {len(labels)} labels.")
        return {node: f"{self.algorithm}:{label}" for node, label in labels.items()}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, algorithm={self.algorithm!r}, params={self.params!r})"
