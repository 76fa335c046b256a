# src/partitioning/chain_partitioner.py
from collections import defaultdict
from typing import Dict, List

import networkx as nx

from .base_partitioner import BasePartitioner
from src.core.scratch import ScratchArena
from src.core.store_interfaces import IGraphStore
from src.logger_setup import get_logger

logger = get_logger(__name__)

CHAIN_DEGREE = 2

class ChainPartitioner(BasePartitioner):
    """
    Groups degree-2 nodes by connected component.

    Pass 1 takes each node's undirected degree. Pass 2 labels weakly connected
    components over the whole graph, not just the degree-2 nodes, then keeps
    only degree-2 nodes, grouped by component. Groups of one node are dropped.
    Because the component is computed on the full graph, two chains joined
    through a higher-degree node share a group.
    """

    def __init__(self, name: str = "chains"):
        super().__init__(name)

    def _component_labels(self, store: IGraphStore) -> Dict[str, str]:
        graph = nx.Graph()
        graph.add_nodes_from(store.node_ids())
        graph.add_edges_from(store.edges())
        labels: Dict[str, str] = {}
        for component in nx.connected_components(graph):
            label = min(component)
            for node in component:
                labels[node] = label
        return labels

    def partition(self,
                  store: IGraphStore,
                  graph_handle: str,
                  arena: ScratchArena) -> Dict[str, str]:
        degrees = store.node_degrees()
        components = self._component_labels(store)

        chains: Dict[str, List[str]] = defaultdict(list)
        for node, degree in degrees.items():
            if degree == CHAIN_DEGREE and node in components:
                chains[components[node]].append(node)

        assignment: Dict[str, str] = {}
        kept = 0
        for label, members in chains.items():
            if len(members) <= 1:
                continue
            kept += 1
            for node in members:
                assignment[node] = f"chain:{label}"

        logger.info(f"'{self.name}': {kept} chain groups over {len(assignment)} degree-2 nodes "
                    f"({len(chains) - kept} single-node chains dropped).")
        return assignment
