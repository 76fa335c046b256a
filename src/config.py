# config.py
import os
from dotenv import load_dotenv
from src.logger_setup import get_logger

logger = get_logger(__name__)

# Load environment variables from .env file
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value '{raw}'. Using default: {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value '{raw}'. Using default: {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# --- Graph Store Connection ---
NEO4J_URI = os.getenv("NEO4J_URI", "bolt://localhost:7687")
NEO4J_USER = os.getenv("NEO4J_USER", "neo4j")
NEO4J_PASSWORD = os.getenv("NEO4J_PASSWORD")
NEO4J_DATABASE = os.getenv("NEO4J_DATABASE") or None # None -> server default database
if not NEO4J_PASSWORD:
    logger.debug("NEO4J_PASSWORD not found in environment variables. Only the memory backend will be usable.")

# --- Candidate Defaults ---
# Comma-separated, evaluated in this order. Example: DEFAULT_CANDIDATES="stars,chains,wcc"
default_candidates_str = os.getenv("DEFAULT_CANDIDATES", "stars,wcc,louvain,leiden,lpa,chains,kcore")
DEFAULT_CANDIDATES = [c.strip() for c in default_candidates_str.split(',') if c.strip()]

DEGREE_THRESHOLD = _env_int("DEGREE_THRESHOLD", 15) # Hub qualification for the star partitioner
K_VALUE = _env_int("K_VALUE", 3) # Minimum core number kept by the kcore candidate
WRITE_RESULTS = _env_bool("WRITE_RESULTS", True) # Persist the winning candidate
DROP_GRAPH = _env_bool("DROP_GRAPH", False) # Drop the oracle-side projection after a run

# --- Cost Model ---
# 'post_fallback' measures coverage after singleton fallback (error term is normally zero),
# 'pre_fallback' measures it on the partitioner's own assignment.
COST_ERROR_MODE = os.getenv("COST_ERROR_MODE", "post_fallback")
if COST_ERROR_MODE not in ("post_fallback", "pre_fallback"):
    logger.warning(f"Invalid COST_ERROR_MODE value '{COST_ERROR_MODE}'. Using default: post_fallback")
    COST_ERROR_MODE = "post_fallback"

# --- Community Detection Settings (local oracle and GDS) ---
LOUVAIN_RESOLUTION = _env_float("LOUVAIN_RESOLUTION", 1.0)
LOUVAIN_RANDOM_STATE = _env_int("LOUVAIN_RANDOM_STATE", 42) # Fixed seed keeps re-runs comparable
LEIDEN_RESOLUTION = _env_float("LEIDEN_RESOLUTION", 1.0)
LEIDEN_SEED = _env_int("LEIDEN_SEED", 42)
LPA_SEED = _env_int("LPA_SEED", 42)

# --- Paths ---
STATE_DIR = os.getenv("STATE_DIR", "output/state")
LOG_DIR = os.getenv("LOG_DIR", "logs")

logger.debug("Configuration loaded.")
