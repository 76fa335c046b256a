# src/core/store_interfaces.py
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import networkx as nx

SUPER_NODE_LABEL = "SuperNode"
MEMBERSHIP_TYPE = "IN_SUPER"
SUPER_EDGE_TYPE = "SUPER_EDGE"


class IGraphStore(ABC):
    """
    Interface over the shared, mutable graph store.

    Every method is one atomic operation: it either applies completely or not
    at all. No transaction spans two calls. Summary artifacts (SuperNodes,
    memberships, super-edges) are never part of the "original" graph seen by
    the read methods.
    """

    # --- Original graph reads ---

    @abstractmethod
    def count_nodes(self) -> int:
        """Number of original nodes."""
        pass

    @abstractmethod
    def count_edges(self) -> int:
        """Number of original directed edges, parallel edges included."""
        pass

    @abstractmethod
    def node_ids(self) -> List[str]:
        """Identities of all original nodes."""
        pass

    @abstractmethod
    def node_degrees(self) -> Dict[str, int]:
        """
        Undirected degree of every original node: in-degree plus out-degree,
        so parallel edges count once each and a self-loop counts twice.
        """
        pass

    @abstractmethod
    def neighbors(self, node_id: str) -> List[str]:
        """Distinct nodes adjacent to node_id in either direction, excluding node_id itself."""
        pass

    @abstractmethod
    def edges(self) -> List[Tuple[str, str]]:
        """All original directed edges as (source, target) pairs."""
        pass

    # --- Scratch labels ---

    @abstractmethod
    def write_node_property(self, prop: str, values: Dict[str, Any]) -> int:
        """
        Sets prop on each node in values.

        Returns:
            int: Number of nodes actually written (unknown ids are ignored).
        """
        pass

    @abstractmethod
    def read_node_property(self, prop: str) -> Dict[str, Any]:
        """Returns node_id -> value for every original node carrying prop."""
        pass

    @abstractmethod
    def remove_node_property(self, prop: str) -> int:
        """Removes prop from every node. Returns how many nodes carried it."""
        pass

    # --- Supergraph writes ---

    @abstractmethod
    def create_groups_from_property(self, run_id: str, candidate: str, prop: str) -> int:
        """
        Groups original nodes by the stringified value of prop. Creates one
        SuperNode per distinct value (size = member count) and one membership
        per member.

        Returns:
            int: Number of SuperNodes created.
        """
        pass

    @abstractmethod
    def add_singletons_for_uncovered(self, run_id: str, candidate: str) -> int:
        """
        Creates a singleton SuperNode, keyed by the node's own id, for every
        original node without a membership for (run_id, candidate).

        Returns:
            int: Number of singleton SuperNodes created.
        """
        pass

    @abstractmethod
    def create_super_edges(self, run_id: str, candidate: str) -> int:
        """
        Aggregates every original edge whose endpoints map to different
        SuperNodes into a weighted super-edge (weight accumulates).

        Returns:
            int: Number of original edges aggregated.
        """
        pass

    @abstractmethod
    def delete_super_nodes(self, run_id: str, candidate: Optional[str] = None, keep_candidate: Optional[str] = None) -> int:
        """
        Deletes SuperNodes of a run together with their memberships and
        super-edges. With candidate, only that candidate's; with
        keep_candidate, everything except that candidate's.

        Returns:
            int: Number of SuperNodes deleted.
        """
        pass

    # --- Supergraph reads ---

    @abstractmethod
    def count_super_nodes(self, run_id: str, candidate: str) -> int:
        pass

    @abstractmethod
    def count_super_edges(self, run_id: str, candidate: str) -> int:
        pass

    @abstractmethod
    def count_memberships(self, run_id: str, candidate: str) -> int:
        pass

    @abstractmethod
    def count_covered_edges(self, run_id: str, candidate: str) -> int:
        """Original edges whose endpoints both have a membership."""
        pass

    @abstractmethod
    def count_internal_edges(self, run_id: str, candidate: str) -> int:
        """Covered original edges whose endpoints share a SuperNode."""
        pass

    @abstractmethod
    def count_edges_with_property(self, prop: str) -> int:
        """Original edges whose endpoints both carry prop."""
        pass

    @abstractmethod
    def super_nodes(self, run_id: str, candidate: Optional[str] = None) -> List[Dict[str, Any]]:
        """Rows of {runId, candidate, groupId, size}."""
        pass

    @abstractmethod
    def super_edges(self, run_id: str, candidate: Optional[str] = None) -> List[Dict[str, Any]]:
        """Rows of {runId, candidate, source, target, weight}; source/target are group ids."""
        pass

    @abstractmethod
    def memberships(self, run_id: str, candidate: str) -> List[Tuple[str, str]]:
        """(node_id, group_id) pairs for (run_id, candidate)."""
        pass

    @abstractmethod
    def list_runs(self) -> Dict[str, List[str]]:
        """run_id -> candidates that still have SuperNodes in the store."""
        pass

    def load_supergraph(self, run_id: str, candidate: Optional[str] = None) -> nx.DiGraph:
        """
        Reads the persisted supergraph of a run back as a networkx DiGraph.

        Args:
            run_id (str): Run whose artifacts to read.
            candidate (Optional[str]): Candidate to read. If None, the run must
                                       have exactly one candidate left (its winner).

        Returns:
            nx.DiGraph: Nodes are group ids with a `size` attribute; edges carry `weight`.

        Raises:
            ValueError: If candidate is None and the run has no or several candidates.
        """
        if candidate is None:
            candidates = self.list_runs().get(run_id, [])
            if len(candidates) != 1:
                raise ValueError(f"Run {run_id} has {len(candidates)} candidates with artifacts; name one explicitly.")
            candidate = candidates[0]

        supergraph = nx.DiGraph(run_id=run_id, candidate=candidate)
        for row in self.super_nodes(run_id, candidate):
            supergraph.add_node(row["groupId"], size=row["size"])
        for row in self.super_edges(run_id, candidate):
            supergraph.add_edge(row["source"], row["target"], weight=row["weight"])
        return supergraph

    def close(self) -> None:
        """Releases backend resources. No-op by default."""
        pass


class IPartitionOracle(ABC):
    """Interface for the external community-detection / connectivity engine."""

    @abstractmethod
    def compute_labels(self, graph_handle: str, algorithm: str, params: Dict[str, Any], write_property: str) -> int:
        """
        Runs algorithm on the graph identified by graph_handle and writes each
        node's group label to write_property in the store.

        Args:
            graph_handle (str): Names the graph projection understood by the oracle.
            algorithm (str): One of the oracle's supported algorithm names.
            params (Dict[str, Any]): Algorithm parameters.
            write_property (str): Node property that receives the labels.

        Returns:
            int: Number of nodes labelled.

        Raises:
            OracleError: If the computation fails.
        """
        pass

    @abstractmethod
    def drop_graph(self, graph_handle: str) -> bool:
        """Discards any cached projection for graph_handle. Returns True if one existed."""
        pass
