# src/partitioning/base_partitioner.py
from abc import ABC, abstractmethod
from typing import Dict

from src.core.scratch import ScratchArena
from src.core.store_interfaces import IGraphStore

class BasePartitioner(ABC):
    """
    Abstract base class for the grouping strategies compared by the orchestrator.
    Each instance is one candidate; `name` is the label its artifacts are tagged with.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def partition(self,
                  store: IGraphStore,
                  graph_handle: str,
                  arena: ScratchArena) -> Dict[str, str]:
        """
        Computes a group assignment for the graph in the store.

        Args:
            store (IGraphStore): The shared graph store holding the original graph.
            graph_handle (str): Names the graph projection known to external oracles.
                                Native partitioners ignore it.
            arena (ScratchArena): Scratch-label arena for this (run, candidate).
                                  Any temporary node property must come from it.

        Returns:
            Dict[str, str]: node id -> group key. Nodes may be left out; the
                            materializer covers them with singleton groups.
                            Keys must not collide with node ids of unassigned nodes.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
