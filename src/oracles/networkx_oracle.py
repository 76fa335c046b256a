# src/oracles/networkx_oracle.py
from typing import Any, Callable, Dict

import community as community_louvain # python-louvain library
import igraph as ig
import leidenalg
import networkx as nx

from src.core.errors import OracleError
from src.core.store_interfaces import IGraphStore, IPartitionOracle
from src.logger_setup import get_logger

logger = get_logger(__name__)

class NetworkXOracle(IPartitionOracle):
    """
    In-process partition oracle.

    A graph handle names a projection: an undirected, weighted simple graph
    built from the store on first use and cached until `drop_graph`. Parallel
    edges add up to the edge weight; self-loops are left out.
    Algorithms: wcc, louvain (python-louvain), leiden (leidenalg on igraph),
    lpa, kcore. Labels are written back to the store as node properties.
    """

    def __init__(self, store: IGraphStore):
        self.store = store
        self.projections: Dict[str, nx.Graph] = {}
        self._algorithms: Dict[str, Callable[[nx.Graph, Dict[str, Any]], Dict[str, Any]]] = {
            "wcc": self._wcc,
            "louvain": self._louvain,
            "leiden": self._leiden,
            "lpa": self._lpa,
            "kcore": self._kcore,
        }

    @property
    def supported_algorithms(self):
        return sorted(self._algorithms)

    # --- Projections ---

    def project(self, graph_handle: str) -> nx.Graph:
        """Builds (or rebuilds) the projection named graph_handle from the store."""
        graph = nx.Graph()
        graph.add_nodes_from(self.store.node_ids())
        for u, v in self.store.edges():
            if u == v:
                continue
            if graph.has_edge(u, v):
                graph[u][v]["weight"] += 1.0
            else:
                graph.add_edge(u, v, weight=1.0)
        self.projections[graph_handle] = graph
        logger.info(f"Projected graph '{graph_handle}': {graph.number_of_nodes()} nodes, {graph.number_of_edges()} undirected edges.")
        return graph

    def _projection(self, graph_handle: str) -> nx.Graph:
        graph = self.projections.get(graph_handle)
        if graph is None:
            graph = self.project(graph_handle)
        return graph

    def drop_graph(self, graph_handle: str) -> bool:
        existed = self.projections.pop(graph_handle, None) is not None
        logger.info(f"Dropped projection '{graph_handle}'." if existed else f"No projection named '{graph_handle}' to drop.")
        return existed

    # --- Algorithms ---

    def compute_labels(self, graph_handle: str, algorithm: str, params: Dict[str, Any], write_property: str) -> int:
        compute = self._algorithms.get(algorithm)
        if compute is None:
            raise OracleError(algorithm, f"unsupported algorithm (supported: {', '.join(self.supported_algorithms)})")

        graph = self._projection(graph_handle)
        if graph.number_of_nodes() == 0:
            logger.warning(f"Projection '{graph_handle}' is empty; '{algorithm}' labels nothing.")
            return 0

        try:
            labels = compute(graph, params or {})
        except OracleError:
            raise
        except Exception as e:
            logger.error(f"'{algorithm}' failed on projection '{graph_handle}': {e}", exc_info=True)
            raise OracleError(algorithm, str(e)) from e

        written = self.store.write_node_property(write_property, labels)
        logger.info(f"'{algorithm}' on '{graph_handle}': {len(set(labels.values()))} groups over {written} nodes.")
        return written

    @staticmethod
    def _label_components(components) -> Dict[str, str]:
        # Stable labels: each community is named after its smallest member
        labels: Dict[str, str] = {}
        for members in components:
            name = min(members)
            for node in members:
                labels[node] = name
        return labels

    def _wcc(self, graph: nx.Graph, params: Dict[str, Any]) -> Dict[str, Any]:
        return self._label_components(nx.connected_components(graph))

    def _louvain(self, graph: nx.Graph, params: Dict[str, Any]) -> Dict[str, Any]:
        partition_map = community_louvain.best_partition(
            graph,
            weight='weight',
            resolution=params.get("resolution", 1.0),
            random_state=params.get("seed"),
        )
        communities: Dict[Any, list] = {}
        for node, community_id in partition_map.items():
            communities.setdefault(community_id, []).append(node)
        return self._label_components(communities.values())

    def _leiden(self, graph: nx.Graph, params: Dict[str, Any]) -> Dict[str, Any]:
        nodes = list(graph.nodes())
        index = {node: i for i, node in enumerate(nodes)}
        ig_graph = ig.Graph(n=len(nodes), edges=[(index[u], index[v]) for u, v in graph.edges()])
        ig_graph.es["weight"] = [data.get("weight", 1.0) for _, _, data in graph.edges(data=True)]
        partition = leidenalg.find_partition(
            ig_graph,
            leidenalg.RBConfigurationVertexPartition,
            weights="weight",
            resolution_parameter=params.get("resolution", 1.0),
            seed=params.get("seed"),
        )
        communities: Dict[int, list] = {}
        for i, community_id in enumerate(partition.membership):
            communities.setdefault(community_id, []).append(nodes[i])
        return self._label_components(communities.values())

    def _lpa(self, graph: nx.Graph, params: Dict[str, Any]) -> Dict[str, Any]:
        return self._label_components(
            nx.community.asyn_lpa_communities(graph, weight="weight", seed=params.get("seed"))
        )

    def _kcore(self, graph: nx.Graph, params: Dict[str, Any]) -> Dict[str, Any]:
        k = int(params.get("k", 0))
        core_numbers = nx.core_number(graph)
        # Nodes below k stay unlabelled
        return {node: core for node, core in core_numbers.items() if core >= k}
