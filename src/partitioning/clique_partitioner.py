# src/partitioning/clique_partitioner.py
from typing import Dict, List

import networkx as nx

from .base_partitioner import BasePartitioner
from src.core.scratch import ScratchArena
from src.core.store_interfaces import IGraphStore
from src.logger_setup import get_logger

logger = get_logger(__name__)

MIN_CLIQUE_SIZE = 3

class CliquePartitioner(BasePartitioner):
    """
    Groups nodes of maximal cliques (3 nodes or more) of the undirected view.

    Cliques are visited largest first, ties by their sorted member list. Each
    clique claims its unclaimed members (first writer wins) and is kept only if
    it still claims at least MIN_CLIQUE_SIZE nodes.
    """

    def __init__(self, name: str = "cliques"):
        super().__init__(name)

    def partition(self,
                  store: IGraphStore,
                  graph_handle: str,
                  arena: ScratchArena) -> Dict[str, str]:
        graph = nx.Graph()
        graph.add_nodes_from(store.node_ids())
        graph.add_edges_from((u, v) for u, v in store.edges() if u != v)

        cliques: List[List[str]] = [sorted(c) for c in nx.find_cliques(graph) if len(c) >= MIN_CLIQUE_SIZE]
        cliques.sort(key=lambda c: (-len(c), c))

        assignment: Dict[str, str] = {}
        kept = 0
        for clique in cliques:
            unclaimed = [node for node in clique if node not in assignment]
            if len(unclaimed) < MIN_CLIQUE_SIZE:
                continue
            # unclaimed[0] belongs to this clique alone, so the key is unique
            key = f"clique:{unclaimed[0]}"
            for node in unclaimed:
                assignment[node] = key
            kept += 1

        logger.info(f"'{self.name}': kept {kept} of {len(cliques)} maximal cliques, covering {len(assignment)} nodes.")
        return assignment
