"""Tests for the in-memory graph store."""

import pytest

from src.stores.memory_store import MemoryGraphStore


class TestOriginalGraph:
    """Tests for reads of the original graph."""

    def test_degrees_count_parallel_edges_and_self_loops(self):
        store = MemoryGraphStore.from_edges([("a", "b"), ("a", "b"), ("c", "c")])
        assert store.count_nodes() == 3
        assert store.count_edges() == 3
        assert store.node_degrees() == {"a": 2, "b": 2, "c": 2}

    def test_neighbors_are_distinct_and_exclude_self(self):
        store = MemoryGraphStore.from_edges([("a", "b"), ("b", "a"), ("a", "a"), ("c", "a")])
        assert store.neighbors("a") == ["b", "c"]
        assert store.neighbors("missing") == []

    def test_node_ids_are_strings(self):
        store = MemoryGraphStore.from_edges([(1, 2)], nodes=[3])
        assert sorted(store.node_ids()) == ["1", "2", "3"]

    def test_from_edge_list(self, tmp_path):
        path = tmp_path / "graph.txt"
        path.write_text("a b\nb c\na b\n", encoding="utf-8")
        store = MemoryGraphStore.from_edge_list(str(path))
        assert store.count_nodes() == 3
        assert store.count_edges() == 3


class TestScratchProperties:
    """Tests for scratch node properties."""

    def test_write_ignores_unknown_nodes(self, path_store):
        assert path_store.write_node_property("p", {"0": "x", "99": "y"}) == 1
        assert path_store.read_node_property("p") == {"0": "x"}

    def test_remove(self, path_store):
        path_store.write_node_property("p", {"0": "x", "1": "x"})
        assert path_store.remove_node_property("p") == 2
        assert path_store.read_node_property("p") == {}

    def test_count_edges_with_property(self, path_store):
        path_store.write_node_property("p", {"0": "x", "1": "x", "3": "y"})
        assert path_store.count_edges_with_property("p") == 1


class TestSupergraphArtifacts:
    """Tests for SuperNode, membership and super-edge bookkeeping."""

    def test_duplicate_group_leaves_store_untouched(self, path_store):
        """Test that a failing grouping call applies nothing."""
        path_store.write_node_property("p", {"0": "g", "1": "g"})
        assert path_store.create_groups_from_property("r", "c", "p") == 1
        with pytest.raises(ValueError):
            path_store.create_groups_from_property("r", "c", "p")
        assert path_store.count_super_nodes("r", "c") == 1
        assert path_store.count_memberships("r", "c") == 2

    def test_super_edges_aggregate_weights(self):
        store = MemoryGraphStore.from_edges([("a", "b"), ("a", "b"), ("b", "a")])
        store.add_singletons_for_uncovered("r", "c")
        assert store.create_super_edges("r", "c") == 3
        rows = {(row["source"], row["target"]): row["weight"] for row in store.super_edges("r", "c")}
        assert rows == {("a", "b"): 2, ("b", "a"): 1}

    def test_artifacts_do_not_touch_original_graph(self, path_store):
        path_store.add_singletons_for_uncovered("r", "c")
        path_store.create_super_edges("r", "c")
        assert path_store.count_nodes() == 5
        assert path_store.count_edges() == 4

    def test_delete_keeps_candidate(self, path_store):
        for candidate in ("stars", "chains"):
            path_store.add_singletons_for_uncovered("r", candidate)
        path_store.add_singletons_for_uncovered("other", "stars")

        assert path_store.delete_super_nodes("r", keep_candidate="chains") == 5
        assert path_store.list_runs() == {"r": ["chains"], "other": ["stars"]}

    def test_load_supergraph(self, path_store):
        path_store.write_node_property("p", {"1": "chain:0", "2": "chain:0", "3": "chain:0"})
        path_store.create_groups_from_property("r", "chains", "p")
        path_store.add_singletons_for_uncovered("r", "chains")
        path_store.create_super_edges("r", "chains")

        supergraph = path_store.load_supergraph("r")

        assert sorted(supergraph.nodes()) == ["0", "4", "chain:0"]
        assert supergraph.nodes["chain:0"]["size"] == 3
        assert supergraph["0"]["chain:0"]["weight"] == 1
        assert supergraph.number_of_edges() == 2

    def test_load_supergraph_needs_single_candidate(self, path_store):
        path_store.add_singletons_for_uncovered("r", "stars")
        path_store.add_singletons_for_uncovered("r", "chains")
        with pytest.raises(ValueError):
            path_store.load_supergraph("r")
        assert path_store.load_supergraph("r", "stars").number_of_nodes() == 5
