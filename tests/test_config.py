# tests/test_config.py
import pytest

import config


def test_defaults():
    assert config.HIGH_SCORE_MIN > config.MEDIUM_SCORE_MIN
    assert set(config.BAND_COLORS) == {"High", "Medium", "Low", "Unknown"}
    assert 0 < config.TEST_SIZE < 1


def test_env_int(monkeypatch):
    monkeypatch.setenv("PSA_TEST_INT", "17")
    assert config._env_int("PSA_TEST_INT", 3) == 17
    monkeypatch.setenv("PSA_TEST_INT", "  ")
    assert config._env_int("PSA_TEST_INT", 3) == 3


def test_env_int_invalid(monkeypatch):
    monkeypatch.setenv("PSA_TEST_INT", "many")
    with pytest.raises(ValueError, match="PSA_TEST_INT"):
        config._env_int("PSA_TEST_INT", 3)


def test_env_float(monkeypatch):
    monkeypatch.delenv("PSA_TEST_FLOAT", raising=False)
    assert config._env_float("PSA_TEST_FLOAT", 0.3) == 0.3
    monkeypatch.setenv("PSA_TEST_FLOAT", "0.25")
    assert config._env_float("PSA_TEST_FLOAT", 0.3) == 0.25
    monkeypatch.setenv("PSA_TEST_FLOAT", "quarter")
    with pytest.raises(ValueError, match="PSA_TEST_FLOAT"):
        config._env_float("PSA_TEST_FLOAT", 0.3)


def test_out_of_range_test_size_rejected(monkeypatch):
    import importlib

    monkeypatch.setenv("PSA_TEST_SIZE", "1.5")
    try:
        with pytest.raises(ValueError, match="PSA_TEST_SIZE"):
            importlib.reload(config)
    finally:
        monkeypatch.delenv("PSA_TEST_SIZE")
        importlib.reload(config)
