"""
Shared fixtures -- dummy metrics classes bound to a fresh mock client.
"""
from datetime import datetime, timezone

import pytest

from tsquery.db.client import MockClient
from tsquery.metrics.model import Metrics, validates_presence_of


class DummyMetrics(Metrics):
    tag_names = ("dummy_id", "host")
    value_names = ("user_id",)
    validators = (validates_presence_of("dummy_id", "user_id"),)
    before_write = (
        lambda m: setattr(m, "time", datetime(2014, 12, 31, tzinfo=timezone.utc)),
    )


class DummyComplexMetrics(Metrics):
    series = staticmethod(lambda m: f"dummy_{m['dummy_id']}" if m else "dummy_all")
    tag_names = ("dummy_id",)
    value_names = ("value",)


@pytest.fixture
def client():
    return MockClient(time_precision="s")


@pytest.fixture
def dummy(client):
    DummyMetrics.client = client
    yield DummyMetrics
    DummyMetrics.client = None


@pytest.fixture
def dummy_complex(client):
    DummyComplexMetrics.client = client
    yield DummyComplexMetrics
    DummyComplexMetrics.client = None
