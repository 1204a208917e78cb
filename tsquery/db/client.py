"""
Datastore client abstraction -- provider-agnostic wrapper.

Supported providers:
  mock  -- records writes and queries in memory (for tests / offline dev)
  http  -- talks to the datastore's HTTP API through httpx

The core only needs three things from a client: ``write_point``, ``query``
and ``time_precision``.  Connection handling, retries and timeouts belong to
the client; errors from it are passed through unmodified.

Configuration is read from Settings (env / .env).
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Protocol

import httpx

from tsquery.core.config import get_settings
from tsquery.core.logging import get_logger

logger = get_logger(__name__)


class Client(Protocol):
    time_precision: str

    def write_point(self, series: str, params: dict[str, Any]) -> Any: ...

    def query(self, sql: str) -> dict[str, Any]: ...


# ── Mock ─────────────────────────────────────────────────

class MockClient:
    """In-memory client; returns *result* for every query."""

    def __init__(self, result: dict[str, Any] | None = None, time_precision: str | None = None):
        self.result = result if result is not None else {"points": []}
        self.time_precision = time_precision or get_settings().time_precision
        self.writes: list[tuple[str, dict[str, Any]]] = []
        self.queries: list[str] = []

    def write_point(self, series: str, params: dict[str, Any]) -> None:
        logger.info("Mock write series=%s  params=%s", series, params)
        self.writes.append((series, params))

    def query(self, sql: str) -> dict[str, Any]:
        logger.info("Mock query -- %s", sql)
        self.queries.append(sql)
        return self.result


# ── HTTP ─────────────────────────────────────────────────

def _escape_key(value: Any) -> str:
    return str(value).replace(",", r"\,").replace(" ", r"\ ").replace("=", r"\=")


def _field_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"{value}i"
    if isinstance(value, float):
        return repr(value)
    return '"' + str(value).replace("\\", "\\\\").replace('"', '\\"') + '"'


def encode_line(series: str, params: dict[str, Any]) -> str:
    """Encode one point as a line-protocol record."""
    head = _escape_key(series)
    tags = params.get("tags") or {}
    for key in sorted(tags):
        if tags[key] is not None:
            head += f",{_escape_key(key)}={_escape_key(tags[key])}"
    values = params.get("values") or {}
    fields = ",".join(
        f"{_escape_key(k)}={_field_value(v)}" for k, v in values.items() if v is not None
    )
    if not fields:
        raise ValueError(f"Point for series '{series}' has no values")
    line = f"{head} {fields}"
    if params.get("timestamp") is not None:
        line += f" {int(params['timestamp'])}"
    return line


class HttpClient:
    """Client for the datastore HTTP API (``/write`` and ``/query``)."""

    def __init__(
        self,
        base_url: str | None = None,
        database: str | None = None,
        time_precision: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        settings = get_settings()
        self.database = database or settings.influx_database
        self.time_precision = time_precision or settings.time_precision
        self._http = httpx.Client(
            base_url=base_url or settings.base_url,
            timeout=timeout if timeout is not None else settings.http_timeout,
            transport=transport,
        )
        logger.info("HTTP client created  base_url=%s  db=%s", self._http.base_url, self.database)

    def write_point(self, series: str, params: dict[str, Any]) -> None:
        body = encode_line(series, params)
        resp = self._http.post(
            "/write",
            params={"db": self.database, "precision": self.time_precision},
            content=body,
        )
        resp.raise_for_status()
        logger.info("Wrote point to series=%s", series)

    def query(self, sql: str) -> dict[str, Any]:
        """Run *sql* and return a named-series map ``{name: [point, ...]}``."""
        resp = self._http.get(
            "/query",
            params={"db": self.database, "q": sql, "epoch": self.time_precision},
        )
        resp.raise_for_status()
        payload = resp.json()

        result: dict[str, list[dict[str, Any]]] = {}
        for statement in payload.get("results", []):
            if "error" in statement:
                raise RuntimeError(f"Query failed: {statement['error']}")
            for series in statement.get("series", []):
                columns = series.get("columns", [])
                points = [dict(zip(columns, row)) for row in series.get("values", [])]
                result.setdefault(series.get("name", ""), []).extend(points)
        logger.info("Query returned %d series", len(result))
        return result

    def close(self) -> None:
        self._http.close()


_PROVIDERS: dict[str, Callable[[], Any]] = {
    "mock": MockClient,
    "http": HttpClient,
}


def get_client(provider: str | None = None) -> Client:
    """Create a client for the configured (or overridden) provider.

    Parameters
    ----------
    provider : str, optional
        Override the provider from settings.  One of: mock, http.
    """
    if provider is None:
        provider = get_settings().client_provider.lower()

    factory = _PROVIDERS.get(provider)
    if factory is None:
        raise NotImplementedError(
            f"Client provider '{provider}' is not supported.  "
            f"Choose from: {', '.join(_PROVIDERS)}"
        )
    logger.info("Creating client provider=%s", provider)
    return factory()


@lru_cache
def get_default_client() -> Client:
    """Shared client for metrics classes that do not set their own."""
    return get_client()
