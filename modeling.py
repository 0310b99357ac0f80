# modeling.py — random-forest models over the synthetic session table
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.metrics import (accuracy_score, classification_report, confusion_matrix,
                             mean_absolute_error, r2_score)
from sklearn.model_selection import train_test_split

logger = logging.getLogger(__name__)

FEATURE_COLUMNS = [
    "engagement",
    "dwell_time",
    "pages_viewed",
    "personalization_score",
    "returning_visitor",
]
MIN_ROWS = 10


class InsufficientDataError(ValueError):
    """Not enough usable rows (or target classes) to fit a model."""


@dataclass
class ModelReport:
    model: object
    feature_names: List[str]
    importances: pd.DataFrame
    n_train: int
    n_test: int
    metrics: dict = field(default_factory=dict)
    confusion: Optional[np.ndarray] = None
    report_text: str = ""


def build_feature_matrix(sessions: pd.DataFrame):
    """Numeric features plus one-hot ``device``; missing numerics filled with the median."""
    cols = [c for c in FEATURE_COLUMNS if c in sessions.columns]
    if not cols:
        raise InsufficientDataError("no model feature columns present")
    X = sessions[cols].apply(pd.to_numeric, errors="coerce")
    X = X.replace([np.inf, -np.inf], np.nan)
    X = X.fillna(X.median(numeric_only=True))
    if "device" in sessions.columns:
        dummies = pd.get_dummies(sessions["device"].fillna("unknown").astype(str), prefix="device", dtype=int)
        X = pd.concat([X, dummies], axis=1)
    return X, X.columns.tolist()


def feature_importances(model, feature_names) -> pd.DataFrame:
    imp = pd.DataFrame({"feature": list(feature_names), "importance": model.feature_importances_})
    return imp.sort_values("importance", ascending=False).reset_index(drop=True)


def fit_conversion_classifier(sessions: pd.DataFrame, n_estimators: int = 300,
                              random_state: int = 42, test_size: float = 0.30) -> ModelReport:
    """Predict ``converted`` from session behaviour."""
    df = sessions.dropna(subset=["converted"])
    if len(df) < MIN_ROWS:
        raise InsufficientDataError(f"need at least {MIN_ROWS} sessions, got {len(df)}")
    y = df["converted"].astype(int)
    if y.nunique() < 2:
        raise InsufficientDataError("conversion target has a single class")

    X, names = build_feature_matrix(df)
    # stratify only when every class can appear on both sides of the split
    stratify = y if y.value_counts().min() >= 2 else None
    X_train, X_test, y_train, y_test = train_test_split(
        X, y, test_size=test_size, random_state=random_state, stratify=stratify
    )
    rf = RandomForestClassifier(n_estimators=n_estimators, random_state=random_state, n_jobs=-1)
    rf.fit(X_train, y_train)
    y_pred = rf.predict(X_test)

    acc = accuracy_score(y_test, y_pred)
    logger.info("conversion classifier: accuracy=%.3f (train=%d, test=%d)", acc, len(X_train), len(X_test))
    return ModelReport(
        model=rf,
        feature_names=names,
        importances=feature_importances(rf, names),
        n_train=len(X_train),
        n_test=len(X_test),
        metrics={"accuracy": float(acc)},
        confusion=confusion_matrix(y_test, y_pred, labels=[0, 1]),
        report_text=classification_report(y_test, y_pred, labels=[0, 1], zero_division=0),
    )


def fit_order_value_regressor(sessions: pd.DataFrame, n_estimators: int = 300,
                              random_state: int = 42, test_size: float = 0.30) -> ModelReport:
    """Predict ``order_value`` for converted sessions."""
    df = sessions.dropna(subset=["order_value"])
    if "converted" in df.columns:
        df = df[df["converted"] == 1]
    if len(df) < MIN_ROWS:
        raise InsufficientDataError(f"need at least {MIN_ROWS} converted sessions, got {len(df)}")

    X, names = build_feature_matrix(df)
    y = df["order_value"].astype(float)
    X_train, X_test, y_train, y_test = train_test_split(
        X, y, test_size=test_size, random_state=random_state
    )
    rf = RandomForestRegressor(n_estimators=n_estimators, random_state=random_state, n_jobs=-1)
    rf.fit(X_train, y_train)
    y_pred = rf.predict(X_test)

    r2 = r2_score(y_test, y_pred)
    mae = mean_absolute_error(y_test, y_pred)
    logger.info("order value regressor: r2=%.3f mae=%.2f (train=%d, test=%d)", r2, mae, len(X_train), len(X_test))
    return ModelReport(
        model=rf,
        feature_names=names,
        importances=feature_importances(rf, names),
        n_train=len(X_train),
        n_test=len(X_test),
        metrics={"r2": float(r2), "mae": float(mae)},
    )
