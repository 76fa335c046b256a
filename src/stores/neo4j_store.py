# src/stores/neo4j_store.py
import re
from typing import Any, Dict, List, Optional, Tuple

from neo4j import GraphDatabase, Driver
from neo4j.exceptions import AuthError, ServiceUnavailable, SessionExpired

import src.config as config
from src.core.errors import StoreConnectionError
from src.core.store_interfaces import IGraphStore
from src.logger_setup import get_logger

logger = get_logger(__name__)

# Property keys cannot be parameterized in Cypher, so they are spliced into
# the query text between backticks and must stay plain identifiers.
_PROPERTY_KEY = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Shared pattern fragments: SuperNodes and their links are never original graph
_ORIGINAL_NODE = "NOT n:SuperNode"
_ORIGINAL_EDGE = "NOT a:SuperNode AND NOT b:SuperNode"


def property_key(prop: str) -> str:
    if not _PROPERTY_KEY.match(prop):
        raise ValueError(f"Invalid property key for Cypher: '{prop}'")
    return f"`{prop}`"


class Neo4jGraphStore(IGraphStore):
    """
    Graph store adapter for a Neo4j database.

    Node identity is `elementId(n)`. Each method is a single Cypher statement
    run in its own managed transaction, which gives per-call atomicity.
    """

    def __init__(self, driver: Driver, database: Optional[str] = None):
        self.driver = driver
        self.database = database

    @classmethod
    def from_config(cls, uri: Optional[str] = None, user: Optional[str] = None,
                    password: Optional[str] = None, database: Optional[str] = None) -> "Neo4jGraphStore":
        """Connects using explicit arguments or the NEO4J_* settings in config."""
        uri = uri or config.NEO4J_URI
        user = user or config.NEO4J_USER
        password = password or config.NEO4J_PASSWORD
        database = database or config.NEO4J_DATABASE
        logger.info(f"Connecting to Neo4j at {uri} (database: {database or 'default'})")
        driver = GraphDatabase.driver(uri, auth=(user, password))
        try:
            driver.verify_connectivity()
        except (ServiceUnavailable, AuthError) as e:
            driver.close()
            raise StoreConnectionError(f"Cannot reach Neo4j at {uri}: {e}") from e
        return cls(driver, database)

    def close(self) -> None:
        self.driver.close()

    # --- Query execution ---

    def execute(self, query: str, params: Optional[Dict[str, Any]] = None, write: bool = False) -> List[Dict[str, Any]]:
        """
        Runs one statement in a managed transaction and returns its rows as dicts.

        Raises:
            StoreConnectionError: If the database cannot be reached.
        """
        params = params or {}

        def _work(tx):
            return tx.run(query, params).data()

        try:
            with self.driver.session(database=self.database) as session:
                if write:
                    return session.execute_write(_work)
                return session.execute_read(_work)
        except (ServiceUnavailable, SessionExpired, AuthError) as e:
            raise StoreConnectionError(f"Neo4j unavailable: {e}") from e

    def _count(self, query: str, params: Optional[Dict[str, Any]] = None, write: bool = False) -> int:
        rows = self.execute(query, params, write=write)
        if not rows or rows[0].get("c") is None:
            return 0
        return int(rows[0]["c"])

    # --- Original graph reads ---

    def count_nodes(self) -> int:
        return self._count(f"MATCH (n) WHERE {_ORIGINAL_NODE} RETURN count(n) AS c")

    def count_edges(self) -> int:
        return self._count(f"MATCH (a)-[r]->(b) WHERE {_ORIGINAL_EDGE} RETURN count(r) AS c")

    def node_ids(self) -> List[str]:
        rows = self.execute(f"MATCH (n) WHERE {_ORIGINAL_NODE} RETURN elementId(n) AS id")
        return [row["id"] for row in rows]

    def node_degrees(self) -> Dict[str, int]:
        rows = self.execute(
            f"MATCH (n) WHERE {_ORIGINAL_NODE} "
            "RETURN elementId(n) AS id, "
            "COUNT { (n)-->(m) WHERE NOT m:SuperNode } + COUNT { (n)<--(m) WHERE NOT m:SuperNode } AS d"
        )
        return {row["id"]: int(row["d"]) for row in rows}

    def neighbors(self, node_id: str) -> List[str]:
        rows = self.execute(
            "MATCH (n)--(m) WHERE elementId(n) = $id AND NOT m:SuperNode AND m <> n "
            "RETURN DISTINCT elementId(m) AS id ORDER BY id",
            {"id": node_id},
        )
        return [row["id"] for row in rows]

    def edges(self) -> List[Tuple[str, str]]:
        rows = self.execute(
            f"MATCH (a)-[r]->(b) WHERE {_ORIGINAL_EDGE} RETURN elementId(a) AS s, elementId(b) AS t"
        )
        return [(row["s"], row["t"]) for row in rows]

    # --- Scratch labels ---

    def write_node_property(self, prop: str, values: Dict[str, Any]) -> int:
        if not values:
            return 0
        rows = [{"id": node, "value": value} for node, value in values.items()]
        return self._count(
            "UNWIND $rows AS row "
            "MATCH (n) WHERE elementId(n) = row.id AND NOT n:SuperNode "
            f"SET n.{property_key(prop)} = row.value "
            "RETURN count(n) AS c",
            {"rows": rows},
            write=True,
        )

    def read_node_property(self, prop: str) -> Dict[str, Any]:
        rows = self.execute(
            f"MATCH (n) WHERE {_ORIGINAL_NODE} AND n.{property_key(prop)} IS NOT NULL "
            f"RETURN elementId(n) AS id, n.{property_key(prop)} AS value"
        )
        return {row["id"]: row["value"] for row in rows}

    def remove_node_property(self, prop: str) -> int:
        return self._count(
            f"MATCH (n) WHERE n.{property_key(prop)} IS NOT NULL REMOVE n.{property_key(prop)} RETURN count(n) AS c",
            write=True,
        )

    # --- Supergraph writes ---

    def create_groups_from_property(self, run_id: str, candidate: str, prop: str) -> int:
        return self._count(
            f"MATCH (n) WHERE {_ORIGINAL_NODE} AND n.{property_key(prop)} IS NOT NULL "
            f"WITH toString(n.{property_key(prop)}) AS gid, collect(n) AS nodes "
            "CREATE (s:SuperNode {runId:$r, candidate:$c, groupId:gid, size:size(nodes)}) "
            "WITH s, nodes UNWIND nodes AS n "
            "CREATE (n)-[:IN_SUPER {runId:$r, candidate:$c}]->(s) "
            "RETURN count(DISTINCT s) AS c",
            {"r": run_id, "c": candidate},
            write=True,
        )

    def add_singletons_for_uncovered(self, run_id: str, candidate: str) -> int:
        return self._count(
            f"MATCH (n) WHERE {_ORIGINAL_NODE} "
            "AND NOT (n)-[:IN_SUPER {runId:$r, candidate:$c}]->() "
            "CREATE (s:SuperNode {runId:$r, candidate:$c, groupId:elementId(n), size:1}) "
            "CREATE (n)-[:IN_SUPER {runId:$r, candidate:$c}]->(s) "
            "RETURN count(s) AS c",
            {"r": run_id, "c": candidate},
            write=True,
        )

    def create_super_edges(self, run_id: str, candidate: str) -> int:
        # Aggregate before MERGE so each (sa, sb) pair is touched once
        return self._count(
            f"MATCH (a)-[rel]->(b) WHERE {_ORIGINAL_EDGE} "
            "MATCH (a)-[:IN_SUPER {runId:$r, candidate:$c}]->(sa) "
            "MATCH (b)-[:IN_SUPER {runId:$r, candidate:$c}]->(sb) "
            "WHERE sa <> sb "
            "WITH sa, sb, count(rel) AS w "
            "MERGE (sa)-[e:SUPER_EDGE {runId:$r, candidate:$c}]->(sb) "
            "ON CREATE SET e.weight = w "
            "ON MATCH SET e.weight = e.weight + w "
            "RETURN sum(w) AS c",
            {"r": run_id, "c": candidate},
            write=True,
        )

    def delete_super_nodes(self, run_id: str, candidate: Optional[str] = None, keep_candidate: Optional[str] = None) -> int:
        conditions = ["s.runId = $r"]
        if candidate is not None:
            conditions.append("s.candidate = $c")
        if keep_candidate is not None:
            conditions.append("s.candidate <> $keep")
        return self._count(
            f"MATCH (s:SuperNode) WHERE {' AND '.join(conditions)} "
            "DETACH DELETE s RETURN count(s) AS c",
            {"r": run_id, "c": candidate, "keep": keep_candidate},
            write=True,
        )

    # --- Supergraph reads ---

    def count_super_nodes(self, run_id: str, candidate: str) -> int:
        return self._count(
            "MATCH (s:SuperNode {runId:$r, candidate:$c}) RETURN count(s) AS c",
            {"r": run_id, "c": candidate},
        )

    def count_super_edges(self, run_id: str, candidate: str) -> int:
        return self._count(
            "MATCH ()-[e:SUPER_EDGE {runId:$r, candidate:$c}]->() RETURN count(e) AS c",
            {"r": run_id, "c": candidate},
        )

    def count_memberships(self, run_id: str, candidate: str) -> int:
        return self._count(
            "MATCH ()-[m:IN_SUPER {runId:$r, candidate:$c}]->() RETURN count(m) AS c",
            {"r": run_id, "c": candidate},
        )

    def count_covered_edges(self, run_id: str, candidate: str) -> int:
        return self._count(
            f"MATCH (a)-[rel]->(b) WHERE {_ORIGINAL_EDGE} "
            "MATCH (a)-[:IN_SUPER {runId:$r, candidate:$c}]->(sa) "
            "MATCH (b)-[:IN_SUPER {runId:$r, candidate:$c}]->(sb) "
            "RETURN count(rel) AS c",
            {"r": run_id, "c": candidate},
        )

    def count_internal_edges(self, run_id: str, candidate: str) -> int:
        return self._count(
            f"MATCH (a)-[rel]->(b) WHERE {_ORIGINAL_EDGE} "
            "MATCH (a)-[:IN_SUPER {runId:$r, candidate:$c}]->(sa) "
            "MATCH (b)-[:IN_SUPER {runId:$r, candidate:$c}]->(sb) "
            "WHERE sa = sb "
            "RETURN count(rel) AS c",
            {"r": run_id, "c": candidate},
        )

    def count_edges_with_property(self, prop: str) -> int:
        return self._count(
            f"MATCH (a)-[r]->(b) WHERE {_ORIGINAL_EDGE} "
            f"AND a.{property_key(prop)} IS NOT NULL AND b.{property_key(prop)} IS NOT NULL "
            "RETURN count(r) AS c"
        )

    def super_nodes(self, run_id: str, candidate: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.execute(
            "MATCH (s:SuperNode) WHERE s.runId = $r AND ($c IS NULL OR s.candidate = $c) "
            "RETURN s.runId AS runId, s.candidate AS candidate, s.groupId AS groupId, s.size AS size",
            {"r": run_id, "c": candidate},
        )

    def super_edges(self, run_id: str, candidate: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.execute(
            "MATCH (sa:SuperNode)-[e:SUPER_EDGE]->(sb:SuperNode) "
            "WHERE e.runId = $r AND ($c IS NULL OR e.candidate = $c) "
            "RETURN e.runId AS runId, e.candidate AS candidate, "
            "sa.groupId AS source, sb.groupId AS target, e.weight AS weight",
            {"r": run_id, "c": candidate},
        )

    def memberships(self, run_id: str, candidate: str) -> List[Tuple[str, str]]:
        rows = self.execute(
            "MATCH (n)-[:IN_SUPER {runId:$r, candidate:$c}]->(s:SuperNode) "
            "RETURN elementId(n) AS node, s.groupId AS groupId",
            {"r": run_id, "c": candidate},
        )
        return [(row["node"], row["groupId"]) for row in rows]

    def list_runs(self) -> Dict[str, List[str]]:
        rows = self.execute(
            "MATCH (s:SuperNode) RETURN s.runId AS runId, collect(DISTINCT s.candidate) AS candidates"
        )
        return {row["runId"]: list(row["candidates"]) for row in rows}
