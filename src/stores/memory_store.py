# src/stores/memory_store.py
import itertools
import threading
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Tuple

import networkx as nx

from src.core.store_interfaces import IGraphStore
from src.logger_setup import get_logger

logger = get_logger(__name__)

RunKey = Tuple[str, str]


class MemoryGraphStore(IGraphStore):
    """
    In-process graph store backed by a networkx MultiDiGraph.

    The original graph lives in `self.graph`; scratch labels are node
    attributes on it. Summary artifacts are kept beside the graph so they never
    show up in degree or edge scans. Each public method takes the store lock and
    computes its full effect before committing it, so a failing call leaves the
    store untouched.
    """

    def __init__(self, graph: Optional[nx.MultiDiGraph] = None):
        self.graph = nx.MultiDiGraph()
        self._lock = threading.RLock()
        self._ids = itertools.count(1)
        self._super_nodes: Dict[str, Dict[str, Any]] = {}
        self._group_index: Dict[Tuple[str, str, str], str] = {}
        self._memberships: Dict[RunKey, Dict[str, str]] = defaultdict(dict)
        self._super_edges: Dict[RunKey, Dict[Tuple[str, str], int]] = defaultdict(dict)
        if graph is not None:
            self.load_graph(graph)

    # --- Loading ---

    @classmethod
    def from_edges(cls, edges: Iterable[Tuple[Any, Any]], nodes: Iterable[Any] = ()) -> "MemoryGraphStore":
        """Builds a store from (source, target) pairs plus optional isolated nodes."""
        store = cls()
        store.add_nodes(nodes)
        store.add_edges(edges)
        return store

    @classmethod
    def from_edge_list(cls, path: str) -> "MemoryGraphStore":
        """Reads a whitespace-separated edge list file (one 'source target' pair per line)."""
        graph = nx.read_edgelist(path, create_using=nx.MultiDiGraph, nodetype=str, data=False)
        logger.info(f"Read edge list {path}: {graph.number_of_nodes()} nodes, {graph.number_of_edges()} edges.")
        return cls(graph)

    def load_graph(self, graph: nx.Graph) -> None:
        """Copies nodes and edges of any networkx graph, stringifying node ids."""
        with self._lock:
            self.add_nodes(graph.nodes())
            self.add_edges(graph.edges())

    def add_nodes(self, nodes: Iterable[Any]) -> None:
        with self._lock:
            for node in nodes:
                self.graph.add_node(str(node))

    def add_edges(self, edges: Iterable[Tuple[Any, Any]]) -> None:
        with self._lock:
            for source, target in edges:
                self.graph.add_edge(str(source), str(target))

    # --- Original graph reads ---

    def count_nodes(self) -> int:
        with self._lock:
            return self.graph.number_of_nodes()

    def count_edges(self) -> int:
        with self._lock:
            return self.graph.number_of_edges()

    def node_ids(self) -> List[str]:
        with self._lock:
            return list(self.graph.nodes())

    def node_degrees(self) -> Dict[str, int]:
        with self._lock:
            # MultiDiGraph.degree is in + out, a self-loop contributing 2
            return dict(self.graph.degree())

    def neighbors(self, node_id: str) -> List[str]:
        with self._lock:
            if node_id not in self.graph:
                return []
            adjacent = set(self.graph.successors(node_id)) | set(self.graph.predecessors(node_id))
            adjacent.discard(node_id)
            return sorted(adjacent)

    def edges(self) -> List[Tuple[str, str]]:
        with self._lock:
            return [(u, v) for u, v in self.graph.edges()]

    # --- Scratch labels ---

    def write_node_property(self, prop: str, values: Dict[str, Any]) -> int:
        with self._lock:
            known = {node: value for node, value in values.items() if node in self.graph}
            for node, value in known.items():
                self.graph.nodes[node][prop] = value
            return len(known)

    def read_node_property(self, prop: str) -> Dict[str, Any]:
        with self._lock:
            return {node: data[prop] for node, data in self.graph.nodes(data=True) if data.get(prop) is not None}

    def remove_node_property(self, prop: str) -> int:
        with self._lock:
            removed = 0
            for _, data in self.graph.nodes(data=True):
                if prop in data:
                    del data[prop]
                    removed += 1
            return removed

    # --- Supergraph writes ---

    def _new_super_node(self, run_id: str, candidate: str, group_id: str, size: int,
                        staged: Dict[Tuple[str, str, str], str]) -> Tuple[str, Dict[str, Any]]:
        key = (run_id, candidate, group_id)
        if key in self._group_index or key in staged:
            raise ValueError(f"SuperNode with groupId '{group_id}' already exists for run {run_id}, candidate '{candidate}'")
        sid = f"sn{next(self._ids)}"
        staged[key] = sid
        return sid, {"runId": run_id, "candidate": candidate, "groupId": group_id, "size": size}

    def create_groups_from_property(self, run_id: str, candidate: str, prop: str) -> int:
        with self._lock:
            groups: Dict[str, List[str]] = defaultdict(list)
            for node, value in self.read_node_property(prop).items():
                groups[str(value)].append(node)

            staged_index: Dict[Tuple[str, str, str], str] = {}
            staged_nodes: Dict[str, Dict[str, Any]] = {}
            staged_members: Dict[str, str] = {}
            for group_id, members in groups.items():
                sid, row = self._new_super_node(run_id, candidate, group_id, len(members), staged_index)
                staged_nodes[sid] = row
                for node in members:
                    staged_members[node] = sid

            self._super_nodes.update(staged_nodes)
            self._group_index.update(staged_index)
            self._memberships[(run_id, candidate)].update(staged_members)
            return len(staged_nodes)

    def add_singletons_for_uncovered(self, run_id: str, candidate: str) -> int:
        with self._lock:
            covered = self._memberships.get((run_id, candidate), {})
            staged_index: Dict[Tuple[str, str, str], str] = {}
            staged_nodes: Dict[str, Dict[str, Any]] = {}
            staged_members: Dict[str, str] = {}
            for node in self.graph.nodes():
                if node in covered:
                    continue
                sid, row = self._new_super_node(run_id, candidate, node, 1, staged_index)
                staged_nodes[sid] = row
                staged_members[node] = sid

            self._super_nodes.update(staged_nodes)
            self._group_index.update(staged_index)
            self._memberships[(run_id, candidate)].update(staged_members)
            return len(staged_nodes)

    def create_super_edges(self, run_id: str, candidate: str) -> int:
        with self._lock:
            members = self._memberships.get((run_id, candidate), {})
            weights = dict(self._super_edges.get((run_id, candidate), {}))
            aggregated = 0
            for u, v in self.graph.edges():
                su, sv = members.get(u), members.get(v)
                if su is None or sv is None or su == sv:
                    continue
                weights[(su, sv)] = weights.get((su, sv), 0) + 1
                aggregated += 1
            self._super_edges[(run_id, candidate)] = weights
            return aggregated

    def delete_super_nodes(self, run_id: str, candidate: Optional[str] = None, keep_candidate: Optional[str] = None) -> int:
        with self._lock:
            doomed = [
                sid for sid, row in self._super_nodes.items()
                if row["runId"] == run_id
                and (candidate is None or row["candidate"] == candidate)
                and (keep_candidate is None or row["candidate"] != keep_candidate)
            ]
            doomed_keys = {(self._super_nodes[sid]["runId"], self._super_nodes[sid]["candidate"]) for sid in doomed}
            for sid in doomed:
                row = self._super_nodes.pop(sid)
                self._group_index.pop((row["runId"], row["candidate"], row["groupId"]), None)
            # Detach: memberships and super-edges only reference SuperNodes of their own key
            for key in doomed_keys:
                self._memberships.pop(key, None)
                self._super_edges.pop(key, None)
            return len(doomed)

    # --- Supergraph reads ---

    def count_super_nodes(self, run_id: str, candidate: str) -> int:
        with self._lock:
            return sum(1 for row in self._super_nodes.values() if row["runId"] == run_id and row["candidate"] == candidate)

    def count_super_edges(self, run_id: str, candidate: str) -> int:
        with self._lock:
            return len(self._super_edges.get((run_id, candidate), {}))

    def count_memberships(self, run_id: str, candidate: str) -> int:
        with self._lock:
            return len(self._memberships.get((run_id, candidate), {}))

    def count_covered_edges(self, run_id: str, candidate: str) -> int:
        with self._lock:
            members = self._memberships.get((run_id, candidate), {})
            return sum(1 for u, v in self.graph.edges() if u in members and v in members)

    def count_internal_edges(self, run_id: str, candidate: str) -> int:
        with self._lock:
            members = self._memberships.get((run_id, candidate), {})
            return sum(1 for u, v in self.graph.edges()
                       if u in members and v in members and members[u] == members[v])

    def count_edges_with_property(self, prop: str) -> int:
        with self._lock:
            labelled = self.read_node_property(prop)
            return sum(1 for u, v in self.graph.edges() if u in labelled and v in labelled)

    def super_nodes(self, run_id: str, candidate: Optional[str] = None) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(row) for row in self._super_nodes.values()
                    if row["runId"] == run_id and (candidate is None or row["candidate"] == candidate)]

    def super_edges(self, run_id: str, candidate: Optional[str] = None) -> List[Dict[str, Any]]:
        with self._lock:
            rows = []
            for (rid, cand), weights in self._super_edges.items():
                if rid != run_id or (candidate is not None and cand != candidate):
                    continue
                for (su, sv), weight in weights.items():
                    rows.append({
                        "runId": rid,
                        "candidate": cand,
                        "source": self._super_nodes[su]["groupId"],
                        "target": self._super_nodes[sv]["groupId"],
                        "weight": weight,
                    })
            return rows

    def memberships(self, run_id: str, candidate: str) -> List[Tuple[str, str]]:
        with self._lock:
            members = self._memberships.get((run_id, candidate), {})
            return [(node, self._super_nodes[sid]["groupId"]) for node, sid in members.items()]

    def list_runs(self) -> Dict[str, List[str]]:
        with self._lock:
            runs: Dict[str, List[str]] = defaultdict(list)
            for row in self._super_nodes.values():
                if row["candidate"] not in runs[row["runId"]]:
                    runs[row["runId"]].append(row["candidate"])
            return dict(runs)
