# src/partitioning/registry.py
from typing import Dict, List, Optional, Tuple

import src.config as global_config
from .base_partitioner import BasePartitioner
from .chain_partitioner import ChainPartitioner
from .clique_partitioner import CliquePartitioner
from .hub_star_partitioner import HubStarPartitioner
from .oracle_partitioner import OraclePartitioner
from src.core.errors import UnknownCandidateError
from src.core.store_interfaces import IPartitionOracle
from src.logger_setup import get_logger
from src.models.condense_models import CondenseOptions

logger = get_logger(__name__)

NATIVE_CANDIDATES = ("stars", "chains", "cliques")
# Candidate name -> oracle algorithm name
ORACLE_CANDIDATES = {
    "wcc": "wcc",
    "louvain": "louvain",
    "leiden": "leiden",
    "lpa": "lpa",
    "kcore": "kcore",
}
KNOWN_CANDIDATES = list(NATIVE_CANDIDATES) + list(ORACLE_CANDIDATES)


def _oracle_params(algorithm: str, options: CondenseOptions) -> Dict[str, object]:
    if algorithm == "kcore":
        return {"k": options.k_value}
    if algorithm == "louvain":
        return {"resolution": global_config.LOUVAIN_RESOLUTION, "seed": global_config.LOUVAIN_RANDOM_STATE}
    if algorithm == "leiden":
        return {"resolution": global_config.LEIDEN_RESOLUTION, "seed": global_config.LEIDEN_SEED}
    if algorithm == "lpa":
        return {"seed": global_config.LPA_SEED}
    return {}


def create_partitioner(name: str,
                       options: CondenseOptions,
                       oracle: Optional[IPartitionOracle] = None) -> BasePartitioner:
    """
    Builds the partitioner variant for one candidate name (case-insensitive).

    Raises:
        UnknownCandidateError: If the name matches no strategy.
    """
    label = name.strip()
    key = label.lower()
    if key == "stars":
        return HubStarPartitioner(options.degree_threshold, name=label)
    if key == "chains":
        return ChainPartitioner(name=label)
    if key == "cliques":
        return CliquePartitioner(name=label)
    if key in ORACLE_CANDIDATES:
        algorithm = ORACLE_CANDIDATES[key]
        return OraclePartitioner(label, algorithm, oracle, _oracle_params(algorithm, options))
    raise UnknownCandidateError(name)


def resolve_partitioners(options: CondenseOptions,
                         oracle: Optional[IPartitionOracle] = None) -> List[Tuple[str, BasePartitioner]]:
    """
    Turns the requested candidate names into (requested name, partitioner)
    pairs, keeping the caller's order. Unknown names are skipped with a
    warning. A name requested more than once (case-insensitively) yields one
    pair per occurrence, all sharing the first occurrence's partitioner, so the
    candidate is evaluated once but reported for every request.
    """
    resolved: List[Tuple[str, BasePartitioner]] = []
    seen: Dict[str, BasePartitioner] = {}
    for name in options.candidates:
        key = name.strip().lower()
        if key in seen:
            logger.warning(f"Candidate '{name}' requested more than once; reusing the result of '{seen[key].name}'.")
            resolved.append((name.strip(), seen[key]))
            continue
        try:
            partitioner = create_partitioner(name, options, oracle)
        except UnknownCandidateError as e:
            logger.warning(f"{e}. Skipping (known candidates: {', '.join(KNOWN_CANDIDATES)}).")
            continue
        seen[key] = partitioner
        resolved.append((partitioner.name, partitioner))
    return resolved
