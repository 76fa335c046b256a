"""Tests for the native partitioners, the oracle delegate and the registry."""

import pytest

from conftest import path_edges
from src.core.errors import OracleError, UnknownCandidateError
from src.core.scratch import ScratchArena
from src.models.condense_models import CondenseOptions
from src.oracles.networkx_oracle import NetworkXOracle
from src.partitioning.chain_partitioner import ChainPartitioner
from src.partitioning.clique_partitioner import CliquePartitioner
from src.partitioning.hub_star_partitioner import HubStarPartitioner
from src.partitioning.oracle_partitioner import OraclePartitioner
from src.partitioning.registry import create_partitioner, resolve_partitioners
from src.stores.memory_store import MemoryGraphStore


def partition(partitioner, store, run_id="run-1"):
    with ScratchArena(store, run_id, partitioner.name) as arena:
        return partitioner.partition(store, "g", arena)


class TestHubStarPartitioner:
    """Tests for hub-star grouping."""

    def test_star_is_one_group(self, star_store):
        """Test that the center and all 12 leaves share the center's key."""
        assignment = partition(HubStarPartitioner(degree_threshold=3), star_store)
        assert len(assignment) == 13
        assert set(assignment.values()) == {"c"}

    def test_threshold_is_strict(self, star_store):
        """Test that a degree equal to the threshold does not make a hub."""
        assert partition(HubStarPartitioner(degree_threshold=12), star_store) == {}

    def test_shared_neighbor_goes_to_higher_degree_hub(self):
        """Test first-writer-wins: hubs claim themselves, then neighbors by descending degree."""
        edges = [("A", f"a{i}") for i in range(4)] + [("B", f"b{i}") for i in range(3)]
        edges += [("A", "s"), ("B", "s"), ("A", "B")]
        store = MemoryGraphStore.from_edges(edges)

        assignment = partition(HubStarPartitioner(degree_threshold=3), store)

        assert assignment["A"] == "A"
        assert assignment["B"] == "B"
        assert assignment["s"] == "A"
        assert all(assignment[f"b{i}"] == "B" for i in range(3))

    def test_equal_degree_hubs_break_ties_by_id(self):
        """Test that among equally connected hubs the smallest id claims first."""
        edges = [("y", f"y{i}") for i in range(3)] + [("x", f"x{i}") for i in range(3)]
        edges += [("y", "s"), ("x", "s")]
        store = MemoryGraphStore.from_edges(edges)

        assignment = partition(HubStarPartitioner(degree_threshold=3), store)
        assert assignment["s"] == "x"

    def test_nodes_far_from_hubs_stay_unassigned(self, star_store):
        star_store.add_edges([("u", "v")])
        assignment = partition(HubStarPartitioner(degree_threshold=3), star_store)
        assert "u" not in assignment
        assert "v" not in assignment


class TestChainPartitioner:
    """Tests for degree-2 chain grouping."""

    def test_path_interior_is_one_chain(self, path_store):
        """Test that the three interior nodes of a 5-node path form one chain."""
        assignment = partition(ChainPartitioner(), path_store)
        assert assignment == {"1": "chain:0", "2": "chain:0", "3": "chain:0"}

    def test_single_degree_two_node_is_dropped(self):
        store = MemoryGraphStore.from_edges(path_edges(3))
        assert partition(ChainPartitioner(), store) == {}

    def test_separate_components_get_separate_chains(self):
        store = MemoryGraphStore.from_edges(path_edges(4, "p") + path_edges(4, "q"))
        assignment = partition(ChainPartitioner(), store)
        assert assignment == {"p1": "chain:p0", "p2": "chain:p0", "q1": "chain:q0", "q2": "chain:q0"}

    def test_chains_joined_through_a_hub_share_a_group(self):
        """Test that connectivity is taken over the whole graph before keeping degree-2 nodes."""
        edges = [("h", "a1"), ("a1", "a2"), ("a2", "x"), ("h", "b1"), ("b1", "b2"), ("b2", "y"), ("h", "z"), ("h", "w")]
        store = MemoryGraphStore.from_edges(edges)
        assert store.node_degrees()["h"] == 4

        assignment = partition(ChainPartitioner(), store)

        assert set(assignment) == {"a1", "a2", "b1", "b2"}
        assert set(assignment.values()) == {"chain:a1"}

    def test_parallel_edges_count_toward_degree(self):
        """Test that a node with two parallel edges to one neighbor has degree 2."""
        store = MemoryGraphStore.from_edges([("a", "b"), ("a", "b"), ("b", "c"), ("b", "c")])
        assignment = partition(ChainPartitioner(), store)
        # a and c have degree 2 as well, b has degree 4
        assert assignment == {"a": "chain:a", "c": "chain:a"}


class TestCliquePartitioner:
    """Tests for maximal-clique grouping."""

    def test_four_clique_with_tail(self):
        edges = [("a", "b"), ("a", "c"), ("a", "d"), ("b", "c"), ("b", "d"), ("c", "d"), ("e", "a")]
        store = MemoryGraphStore.from_edges(edges)
        assignment = partition(CliquePartitioner(), store)
        assert assignment == {n: "clique:a" for n in "abcd"}

    def test_overlapping_triangles_first_writer_wins(self):
        """Test that a clique left with fewer than 3 unclaimed nodes is dropped."""
        edges = [("a", "b"), ("b", "c"), ("c", "a"), ("c", "d"), ("d", "e"), ("e", "c")]
        store = MemoryGraphStore.from_edges(edges)
        assignment = partition(CliquePartitioner(), store)
        assert assignment == {"a": "clique:a", "b": "clique:a", "c": "clique:a"}

    def test_self_loops_are_ignored(self):
        store = MemoryGraphStore.from_edges([("a", "a"), ("a", "b")])
        assert partition(CliquePartitioner(), store) == {}


class TestOraclePartitioner:
    """Tests for delegation to the partition oracle."""

    def test_wcc_keys_are_prefixed(self):
        store = MemoryGraphStore.from_edges([("a", "b"), ("b", "c"), ("x", "y")])
        partitioner = OraclePartitioner("wcc", "wcc", NetworkXOracle(store))
        assignment = partition(partitioner, store)
        assert assignment == {"a": "wcc:a", "b": "wcc:a", "c": "wcc:a", "x": "wcc:x", "y": "wcc:x"}

    def test_label_property_is_released(self):
        """Test that the oracle's scratch label is gone once the arena closes."""
        store = MemoryGraphStore.from_edges([("a", "b")])
        partitioner = OraclePartitioner("wcc", "wcc", NetworkXOracle(store))
        with ScratchArena(store, "run-1", "wcc") as arena:
            label = arena.label("lbl")
            partitioner.partition(store, "g", arena)
            assert store.read_node_property(label)
        assert store.read_node_property(label) == {}

    def test_missing_oracle_raises(self, path_store):
        with pytest.raises(OracleError):
            partition(OraclePartitioner("louvain", "louvain", None), path_store)


class TestRegistry:
    """Tests for candidate name resolution."""

    def test_create_known_names(self):
        options = CondenseOptions(degreeThreshold=7, kValue=2)
        stars = create_partitioner("Stars", options)
        assert isinstance(stars, HubStarPartitioner)
        assert stars.degree_threshold == 7
        kcore = create_partitioner("kcore", options)
        assert isinstance(kcore, OraclePartitioner)
        assert kcore.params == {"k": 2}

    def test_create_unknown_name_raises(self):
        with pytest.raises(UnknownCandidateError):
            create_partitioner("bogus", CondenseOptions())

    def test_resolve_skips_unknown_and_keeps_repeats(self):
        """Test lenient resolution: unknown names skipped, repeats kept in order and sharing one partitioner."""
        options = CondenseOptions(candidates=["chains", "bogus", "stars", "CHAINS"])
        resolved = resolve_partitioners(options)
        assert [name for name, _ in resolved] == ["chains", "stars", "CHAINS"]
        assert resolved[2][1] is resolved[0][1]
        assert resolved[2][1].name == "chains"
