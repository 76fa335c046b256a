# src/partitioning/hub_star_partitioner.py
from typing import Dict

from .base_partitioner import BasePartitioner
from src.core.scratch import ScratchArena
from src.core.store_interfaces import IGraphStore
from src.logger_setup import get_logger

logger = get_logger(__name__)

class HubStarPartitioner(BasePartitioner):
    """
    Groups each high-degree hub with its direct neighbours.

    A node is a hub when its undirected degree is strictly greater than
    `degree_threshold`. Groups are keyed by the hub's id. Membership is
    first-writer-wins:
      1. every hub claims itself;
      2. hubs are visited by descending degree (ties by ascending id) and each
         claims the neighbours nobody has claimed yet.
    Nodes that are neither hubs nor adjacent to one stay unassigned.
    """

    def __init__(self, degree_threshold: int, name: str = "stars"):
        super().__init__(name)
        self.degree_threshold = degree_threshold

    def partition(self,
                  store: IGraphStore,
                  graph_handle: str,
                  arena: ScratchArena) -> Dict[str, str]:
        degrees = store.node_degrees()
        hubs = sorted(
            (node for node, degree in degrees.items() if degree > self.degree_threshold),
            key=lambda node: (-degrees[node], node),
        )
        if not hubs:
            logger.info(f"No node has degree > {self.degree_threshold}; '{self.name}' assigns nothing.")
            return {}

        assignment: Dict[str, str] = {hub: hub for hub in hubs}
        for hub in hubs:
            for neighbor in store.neighbors(hub):
                assignment.setdefault(neighbor, hub)

        logger.info(f"'{self.name}': {len(hubs)} hubs cover {len(assignment)} of {len(degrees)} nodes "
                    f"(threshold {self.degree_threshold}).")
        return assignment
