# selling_score.py — Predictive Selling Score for London boroughs
"""
Composite 0-100 selling score over four behavioural features.

engagement, dwell_time and conversion_rate are max-normalized across the whole
table, personalization_score is already in [0, 1] and is used as-is:

    raw   = 0.40*engagement/max + 0.30*dwell_time/max
          + 0.20*personalization_score + 0.10*conversion_rate/max
    score = min(round(raw, 2) * 100, 100)

Because of the group maxima, changing one row can move every other row's score.
"""
import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from config import HIGH_SCORE_MIN, MEDIUM_SCORE_MIN

logger = logging.getLogger(__name__)

WEIGHTS = {
    "engagement": 0.40,
    "dwell_time": 0.30,
    "personalization_score": 0.20,
    "conversion_rate": 0.10,
}
FEATURE_COLUMNS = list(WEIGHTS)
MAX_NORMALIZED = ["engagement", "dwell_time", "conversion_rate"]
UNIT_INTERVAL = ["personalization_score", "conversion_rate"]
SCORE_COL = "composite_score"


class ScoringInputError(ValueError):
    """The entity table cannot be scored."""


class DegenerateInputError(ScoringInputError):
    """A normalization maximum is zero, so the ratio for that feature is undefined."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"cannot normalize '{column}': every value is 0")


@dataclass(frozen=True)
class ScoredEntity:
    identifier: str
    engagement: float
    dwell_time: float
    personalization_score: float
    conversion_rate: float
    composite_score: Optional[float] = None


def _validate(frame: pd.DataFrame) -> pd.DataFrame:
    if frame is None or len(frame) == 0:
        raise ScoringInputError("need at least one entity to score")
    missing = [c for c in FEATURE_COLUMNS if c not in frame.columns]
    if missing:
        raise ScoringInputError(f"missing feature columns: {', '.join(missing)}")

    feats = frame[FEATURE_COLUMNS].apply(pd.to_numeric, errors="coerce").astype(float)
    for col in FEATURE_COLUMNS:
        if feats[col].isna().any():
            raise ScoringInputError(f"'{col}' has missing or non-numeric values")
        if not np.isfinite(feats[col]).all():
            raise ScoringInputError(f"'{col}' has non-finite values")
        if (feats[col] < 0).any():
            raise ScoringInputError(f"'{col}' has negative values")
    for col in UNIT_INTERVAL:
        if (feats[col] > 1).any():
            raise ScoringInputError(f"'{col}' must lie in [0, 1]")
    return feats


def compute_selling_score(frame: pd.DataFrame, score_col: str = SCORE_COL) -> pd.DataFrame:
    """Return a copy of ``frame`` with ``score_col`` added; row order is kept."""
    feats = _validate(frame)

    maxima = feats[MAX_NORMALIZED].max()
    for col in MAX_NORMALIZED:
        if maxima[col] == 0:
            raise DegenerateInputError(col)
    logger.debug("normalization maxima: %s", maxima.to_dict())

    raw = (
        WEIGHTS["engagement"] * (feats["engagement"] / maxima["engagement"])
        + WEIGHTS["dwell_time"] * (feats["dwell_time"] / maxima["dwell_time"])
        + WEIGHTS["personalization_score"] * feats["personalization_score"]
        + WEIGHTS["conversion_rate"] * (feats["conversion_rate"] / maxima["conversion_rate"])
    )
    # round the fraction first, then scale
    rounded = raw.map(lambda v: round(float(v), 2))

    out = frame.copy()
    out[score_col] = np.minimum(rounded * 100, 100)
    return out


def score_entities(entities: Sequence[ScoredEntity]) -> List[ScoredEntity]:
    if not entities:
        raise ScoringInputError("need at least one entity to score")
    frame = pd.DataFrame(
        [{"identifier": e.identifier, **{c: getattr(e, c) for c in FEATURE_COLUMNS}} for e in entities]
    )
    if frame["identifier"].duplicated().any():
        dupes = frame.loc[frame["identifier"].duplicated(), "identifier"].unique().tolist()
        raise ScoringInputError(f"duplicate identifiers: {', '.join(map(str, dupes))}")
    scored = compute_selling_score(frame)
    return [replace(e, composite_score=float(s)) for e, s in zip(entities, scored[SCORE_COL])]


# ---------- Bands & ranking ----------
def score_band(score: float) -> str:
    if pd.isna(score):
        return "Unknown"
    if score >= HIGH_SCORE_MIN:
        return "High"
    if score >= MEDIUM_SCORE_MIN:
        return "Medium"
    return "Low"


def add_score_bands(scored: pd.DataFrame, score_col: str = SCORE_COL) -> pd.DataFrame:
    out = scored.copy()
    out["score_band"] = out[score_col].apply(score_band)
    return out


def rank_entities(scored: pd.DataFrame, id_col: str = "borough", score_col: str = SCORE_COL) -> pd.DataFrame:
    """Highest score first; ties broken by identifier. Adds a 1-based ``rank``."""
    ranked = scored.sort_values([score_col, id_col], ascending=[False, True], kind="mergesort")
    ranked = ranked.reset_index(drop=True)
    ranked.insert(0, "rank", np.arange(1, len(ranked) + 1))
    return ranked
