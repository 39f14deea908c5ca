# community_config.py

import logging
import os

logger = logging.getLogger(__name__)

# --- Synthetic interaction log ---
DEFAULT_NUM_USERS = 140
DEFAULT_NUM_INTERACTIONS = 500
DEFAULT_SEED = 42
MIN_INTERACTION_WEIGHT = 1
MAX_INTERACTION_WEIGHT = 20  # inclusive
USERNAME_NUMBER_RANGE = (1, 999)  # high end exclusive

USERNAME_PREFIXES = [
    "dark", "shadow", "light", "blue", "red", "green", "gold", "silver",
    "phantom", "ninja", "stealth", "epic", "legend", "super", "mega",
]  # fmt: skip
USERNAME_SUFFIXES = [
    "warrior", "hunter", "mage", "slayer", "knight", "rogue", "wizard",
    "assassin", "lord", "king", "queen", "master", "pro", "noob", "gamer",
]  # fmt: skip

# --- Edge records ---
DEFAULT_EDGE_WEIGHT = 1
MAX_EDGE_WEIGHT = 2**32 - 1
RECORD_FIELD_COUNT = 3

# --- Graph construction ---
ROWS_PER_TASK = 256
MAX_WORKERS_ENV_VAR = "COMMUNITY_MAX_WORKERS"

# --- Rendering ---
HUE_STEP_DEGREES = 60
FILL_SATURATION = 0.5
FILL_VALUE = 0.7
DEFAULT_LOG_FILE = "interactions.csv"
DEFAULT_DOT_FILE = "graph.dot"
DEFAULT_IMAGE_FILE = "graph.png"
DEFAULT_PREVIEW_FILE = "graph_preview.png"
DEFAULT_OUTPUT_DIR = "results"


def default_max_workers() -> int:
    """Worker count for graph construction.

    `COMMUNITY_MAX_WORKERS` wins when it holds a positive integer, otherwise
    the CPU count is used.
    """
    raw_value = os.environ.get(MAX_WORKERS_ENV_VAR)
    if raw_value:
        try:
            value = int(raw_value)
        except ValueError:
            value = 0
        if value > 0:
            return value
        logger.warning(f"Ignoring invalid {MAX_WORKERS_ENV_VAR}={raw_value!r}; using CPU count.")
    return os.cpu_count() or 4
