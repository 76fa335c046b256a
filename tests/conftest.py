"""Shared fixtures: small graphs loaded into the in-memory store."""

import pytest

from src.stores.memory_store import MemoryGraphStore


def star_edges(center="c", leaves=12):
    return [(center, f"l{i:02d}") for i in range(leaves)]


def path_edges(length=5, prefix=""):
    return [(f"{prefix}{i}", f"{prefix}{i + 1}") for i in range(length - 1)]


@pytest.fixture
def star_store():
    """One center with 12 leaves (13 nodes, 12 edges)."""
    return MemoryGraphStore.from_edges(star_edges())


@pytest.fixture
def path_store():
    """Directed path 0 -> 1 -> 2 -> 3 -> 4 (degrees 1, 2, 2, 2, 1)."""
    return MemoryGraphStore.from_edges(path_edges())


@pytest.fixture
def two_cliques_store():
    """Two 4-cliques joined by a single bridge a0 - b0."""
    edges = []
    for prefix in ("a", "b"):
        nodes = [f"{prefix}{i}" for i in range(4)]
        edges.extend((u, v) for i, u in enumerate(nodes) for v in nodes[i + 1:])
    edges.append(("a0", "b0"))
    return MemoryGraphStore.from_edges(edges)
