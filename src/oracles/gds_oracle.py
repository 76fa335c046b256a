# src/oracles/gds_oracle.py
from typing import Any, Dict

from neo4j.exceptions import Neo4jError

from src.core.errors import OracleError, StoreConnectionError
from src.core.store_interfaces import IPartitionOracle
from src.logger_setup import get_logger
from src.stores.neo4j_store import Neo4jGraphStore, property_key

logger = get_logger(__name__)

# Algorithm name -> GDS write-mode procedure
GDS_PROCEDURES = {
    "wcc": "gds.wcc.write",
    "louvain": "gds.louvain.write",
    "leiden": "gds.leiden.write",
    "lpa": "gds.labelPropagation.write",
    "kcore": "gds.kcore.write",
}

# Our parameter names -> GDS configuration keys, per algorithm
GDS_PARAMETERS = {
    "leiden": {"resolution": "gamma", "seed": "randomSeed"},
}

class GdsOracle(IPartitionOracle):
    """
    Partition oracle backed by the Neo4j Graph Data Science library.

    The graph handle is the name of a GDS in-memory projection created by the
    caller (e.g. with `gds.graph.project`). Labels are written straight into
    the database by the write-mode procedures.
    """

    def __init__(self, store: Neo4jGraphStore):
        self.store = store

    def _gds_config(self, algorithm: str, params: Dict[str, Any], write_property: str) -> Dict[str, Any]:
        mapping = GDS_PARAMETERS.get(algorithm, {})
        gds_config: Dict[str, Any] = {"writeProperty": write_property}
        for key, value in params.items():
            if key in mapping and value is not None:
                gds_config[mapping[key]] = value
            else:
                logger.debug(f"Parameter '{key}' is not forwarded to {GDS_PROCEDURES[algorithm]}.")
        return gds_config

    def compute_labels(self, graph_handle: str, algorithm: str, params: Dict[str, Any], write_property: str) -> int:
        procedure = GDS_PROCEDURES.get(algorithm)
        if procedure is None:
            raise OracleError(algorithm, f"unsupported algorithm (supported: {', '.join(sorted(GDS_PROCEDURES))})")

        gds_config = self._gds_config(algorithm, params or {}, write_property)
        try:
            rows = self.store.execute(
                f"CALL {procedure}($g, $config) YIELD nodePropertiesWritten RETURN nodePropertiesWritten AS c",
                {"g": graph_handle, "config": gds_config},
                write=True,
            )
            written = int(rows[0]["c"]) if rows else 0

            if algorithm == "kcore" and params.get("k") is not None:
                # GDS writes every core value; keep only nodes at or above k
                prop = property_key(write_property)
                rows = self.store.execute(
                    f"MATCH (n) WHERE n.{prop} < $k REMOVE n.{prop} RETURN count(n) AS c",
                    {"k": int(params["k"])},
                    write=True,
                )
                written -= int(rows[0]["c"]) if rows else 0
        except StoreConnectionError:
            raise
        except Neo4jError as e:
            logger.error(f"{procedure} failed on graph '{graph_handle}': {e}", exc_info=True)
            raise OracleError(algorithm, str(e)) from e

        logger.info(f"{procedure} on '{graph_handle}' labelled {written} nodes.")
        return written

    def drop_graph(self, graph_handle: str) -> bool:
        try:
            rows = self.store.execute(
                "CALL gds.graph.drop($g, false) YIELD graphName RETURN graphName",
                {"g": graph_handle},
                write=True,
            )
        except StoreConnectionError:
            raise
        except Neo4jError as e:
            raise OracleError("graph.drop", str(e)) from e
        existed = bool(rows)
        logger.info(f"Dropped GDS projection '{graph_handle}'." if existed else f"No GDS projection named '{graph_handle}' to drop.")
        return existed
