# tests/conftest.py

"""
Pytest fixtures - small hand-built tables and seeded synthetic data.
"""

import pandas as pd
import pytest

from synthetic_data import generate_borough_features, generate_sessions


@pytest.fixture
def three_boroughs():
    """Three entities where the third is best on every feature."""
    return pd.DataFrame({
        "borough": ["Alpha", "Bravo", "Charlie"],
        "engagement": [10.0, 20.0, 30.0],
        "dwell_time": [100.0, 200.0, 300.0],
        "personalization_score": [0.6, 0.8, 1.0],
        "conversion_rate": [0.05, 0.10, 0.15],
    })


@pytest.fixture
def borough_features():
    return generate_borough_features(seed=42)


@pytest.fixture(scope="module")
def sessions():
    return generate_sessions(n_samples=600, seed=7)
