"""
Unit tests -- settings defaults and logger setup.
"""
import logging

from tsquery.core.config import Settings
from tsquery.core.errors import InvalidPredicateValue, MetricsError, ValidationFailed
from tsquery.core.logging import get_logger


def test_settings_defaults(monkeypatch):
    for var in ("TSQUERY_INFLUX_HOST", "TSQUERY_INFLUX_PORT", "TSQUERY_CLIENT_PROVIDER", "TSQUERY_TIME_PRECISION"):
        monkeypatch.delenv(var, raising=False)
    settings = Settings()
    assert settings.client_provider == "mock"
    assert settings.time_precision == "s"
    assert settings.base_url == "http://localhost:8086"


def test_settings_env_prefix(monkeypatch):
    monkeypatch.setenv("TSQUERY_INFLUX_HOST", "influx.internal")
    monkeypatch.setenv("TSQUERY_TIME_PRECISION", "ms")
    settings = Settings()
    assert settings.base_url == "http://influx.internal:8086"
    assert settings.time_precision == "ms"


def test_logger_has_single_handler():
    a = get_logger("tsquery.test")
    b = get_logger("tsquery.test")
    assert a is b
    assert len(a.handlers) == 1
    assert a.level in (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR)


def test_error_hierarchy():
    err = InvalidPredicateValue("host", None)
    assert isinstance(err, MetricsError)
    assert isinstance(err, TypeError)
    assert ValidationFailed(["a", "b"]).errors == ["a", "b"]
