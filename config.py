# config.py — environment-driven settings shared by the scripts and the dashboard
import os
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


SEED = _env_int("PSA_SEED", 42)
N_SESSIONS = _env_int("PSA_N_SESSIONS", 2000)
N_ESTIMATORS = _env_int("PSA_N_ESTIMATORS", 300)
TEST_SIZE = _env_float("PSA_TEST_SIZE", 0.30)
if not 0 < TEST_SIZE < 1:
    raise ValueError(f"PSA_TEST_SIZE must lie strictly between 0 and 1, got {TEST_SIZE}")
OUTPUT_DIR = Path(os.getenv("PSA_OUTPUT_DIR", "output"))
LOG_LEVEL = os.getenv("PSA_LOG_LEVEL", "INFO").upper()

# Score bands used for map colouring (lower bounds, inclusive)
HIGH_SCORE_MIN = 70
MEDIUM_SCORE_MIN = 40

BAND_COLORS = {"High": "#16a34a", "Medium": "#f59e0b", "Low": "#dc2626", "Unknown": "#64748b"}
