# tests/test_modeling.py
import numpy as np
import pandas as pd
import pytest

from modeling import (
    InsufficientDataError,
    build_feature_matrix,
    fit_conversion_classifier,
    fit_order_value_regressor,
)


def test_feature_matrix_one_hot_device(sessions):
    X, names = build_feature_matrix(sessions)
    assert list(X.columns) == names
    assert {"device_desktop", "device_mobile", "device_tablet"} <= set(names)
    assert "converted" not in names and "order_value" not in names
    assert not X.isna().any().any()


def test_feature_matrix_fills_missing(sessions):
    df = sessions.head(20).copy()
    df.loc[df.index[0], "engagement"] = np.nan
    X, _ = build_feature_matrix(df)
    assert X["engagement"].iloc[0] == pytest.approx(df["engagement"].median())


def test_conversion_classifier(sessions):
    rep = fit_conversion_classifier(sessions, n_estimators=50, random_state=0)
    assert 0.0 <= rep.metrics["accuracy"] <= 1.0
    assert rep.n_train + rep.n_test == len(sessions)
    assert rep.confusion.shape == (2, 2)
    assert rep.confusion.sum() == rep.n_test
    assert "precision" in rep.report_text
    assert rep.importances["importance"].sum() == pytest.approx(1.0)
    assert rep.importances["importance"].is_monotonic_decreasing
    assert set(rep.importances["feature"]) == set(rep.feature_names)


def test_conversion_classifier_beats_majority(sessions):
    rep = fit_conversion_classifier(sessions, n_estimators=100, random_state=0)
    majority = max(sessions["converted"].mean(), 1 - sessions["converted"].mean())
    assert rep.metrics["accuracy"] >= majority - 0.05


def test_order_value_regressor(sessions):
    rep = fit_order_value_regressor(sessions, n_estimators=50, random_state=0)
    assert rep.n_train + rep.n_test == int((sessions["converted"] == 1).sum())
    assert rep.metrics["mae"] >= 0
    assert "r2" in rep.metrics
    assert rep.confusion is None
    assert rep.importances["importance"].sum() == pytest.approx(1.0)


def test_classifier_single_class_rejected(sessions):
    df = sessions.assign(converted=1)
    with pytest.raises(InsufficientDataError, match="single class"):
        fit_conversion_classifier(df, n_estimators=10)


def test_too_few_rows_rejected(sessions):
    with pytest.raises(InsufficientDataError):
        fit_conversion_classifier(sessions.head(5), n_estimators=10)
    with pytest.raises(InsufficientDataError):
        fit_order_value_regressor(sessions.assign(converted=0), n_estimators=10)


def test_no_feature_columns_rejected():
    with pytest.raises(InsufficientDataError):
        build_feature_matrix(pd.DataFrame({"converted": [0, 1]}))
