"""
Relation — the chainable query builder for one metrics class.

Every builder call mutates the Relation and returns it, so calls chain:

    DummyMetrics.all().where(user_id=1).time("hour", fill=0).limit(10).to_sql()

A Relation is not thread-safe.  Use one Relation per logical query, or
``clone()`` it before handing it to another thread.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any, Iterator, Mapping

from tsquery.core.logging import get_logger
from tsquery.core.utils import timed
from tsquery.query.calculations import install_calculations
from tsquery.query.conditions import Raw, epoch_seconds
from tsquery.query.durations import resolve_duration
from tsquery.query.predicates import translate_all
from tsquery.query.serializer import render_delete, render_select
from tsquery.query.series import SeriesRef
from tsquery.query.state import Calculation, QueryState, merge_states

if TYPE_CHECKING:
    from tsquery.db.client import Client
    from tsquery.metrics.model import Metrics

logger = get_logger(__name__)


def _non_negative(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def _format_fill(value: Any) -> str:
    if isinstance(value, bool):
        raise ValueError(f"Unsupported fill value: {value!r}")
    return str(value)


def extract_points(result: Any) -> list[Any]:
    """Point list of a query result: ``{"points": [...]}`` or ``{series: [...]}``."""
    if not result:
        return []
    if "points" in result:
        return list(result["points"] or [])
    points: list[Any] = []
    for series_points in result.values():
        points.extend(series_points or [])
    return points


class WhereChain:
    """Negation scope returned by ``Relation.where()`` with no arguments."""

    def __init__(self, relation: "Relation"):
        self._relation = relation

    def not_(self, conditions: Mapping[str, Any] | None = None, /, **kwargs: Any) -> "Relation":
        return self._relation._add_where(conditions, kwargs, negated=True)


@install_calculations
class Relation:
    def __init__(
        self,
        klass: type["Metrics"],
        client: "Client | None" = None,
        state: QueryState | None = None,
    ):
        self.klass = klass
        self._client = client
        self.state = state if state is not None else QueryState(series=klass.series)

    @property
    def client(self) -> "Client":
        if self._client is None:
            self._client = self.klass.get_client()
        return self._client

    # ── Selection & predicates ───────────────────────

    def select(self, *fields: str) -> "Relation":
        self.state.select_fields.extend(str(f) for f in fields)
        return self

    def where(
        self, conditions: str | Mapping[str, Any] | None = None, /, **kwargs: Any
    ) -> "Relation | WhereChain":
        if conditions is None and not kwargs:
            return WhereChain(self)
        return self._add_where(conditions, kwargs, negated=False)

    def not_(self, conditions: Mapping[str, Any] | None = None, /, **kwargs: Any) -> "Relation":
        return self._add_where(conditions, kwargs, negated=True)

    def _add_where(
        self,
        conditions: str | Mapping[str, Any] | None,
        kwargs: dict[str, Any],
        negated: bool,
    ) -> "Relation":
        if conditions is not None:
            self.state.where_clauses.extend(translate_all(conditions, negated))
        if kwargs:
            self.state.where_clauses.extend(translate_all(kwargs, negated))
        return self

    # ── Grouping & time ──────────────────────────────

    def group(self, *fields: str) -> "Relation":
        self.state.group.fields.extend(str(f) for f in fields)
        return self

    def time(self, duration: str | int | float | timedelta, fill: Any = None) -> "Relation":
        self.state.group.bucket = resolve_duration(duration)
        if fill is not None:
            self.state.group.fill = _format_fill(fill)
        return self

    def fill(self, value: Any) -> "Relation":
        self.state.group.fill = _format_fill(value)
        return self

    def past(self, duration: str | int | float | timedelta) -> "Relation":
        self.state.time_window = Raw(f"time > now() - {resolve_duration(duration)}")
        return self

    def since(self, instant: datetime | date) -> "Relation":
        self.state.time_window = Raw(f"time > {epoch_seconds(instant)}s")
        return self

    # ── Paging ───────────────────────────────────────

    def limit(self, n: int) -> "Relation":
        self.state.limit = _non_negative("limit", n)
        return self

    def offset(self, n: int) -> "Relation":
        self.state.offset = _non_negative("offset", n)
        return self

    # ── Calculations ─────────────────────────────────

    def calc(self, name: str, *args: Any) -> "Relation":
        """Select ``name(args...)`` instead of the field list; last call wins."""
        self.state.calculation = Calculation(str(name), tuple(args))
        return self

    # ── Merging ──────────────────────────────────────

    def merge(self, other: "Relation | SeriesRef") -> "Relation":
        """Merge series into this query, or merge another Relation into a copy.

        A Relation argument returns a new Relation and leaves both operands
        untouched.  Anything else is a series reference appended to the
        merge targets of this Relation.
        """
        if isinstance(other, Relation):
            return self.clone().merge_in_place(other)
        if isinstance(other, (list, tuple)):
            self.state.merge_targets.extend(other)
        elif isinstance(other, (str, re.Pattern)) or callable(other):
            self.state.merge_targets.append(other)
        else:
            raise TypeError(f"Cannot merge {other!r}")
        return self

    def merge_in_place(self, other: "Relation") -> "Relation":
        merge_states(self.state, other.state.clone())
        return self

    def clone(self) -> "Relation":
        return Relation(self.klass, client=self._client, state=self.state.clone())

    # ── Rendering ────────────────────────────────────

    def to_sql(self) -> str:
        return render_select(self.state)

    def to_delete_sql(self) -> str:
        return render_delete(self.state)

    def __str__(self) -> str:
        return self.to_sql()

    # ── Model construction & writes ──────────────────

    def build(self, /, **attrs: Any) -> "Metrics":
        return self.klass(self._client, **attrs)

    new = build

    def write(self, /, **attrs: Any) -> "Metrics | bool":
        return self.build(**attrs).write()

    def write_or_raise(self, /, **attrs: Any) -> "Metrics":
        return self.build(**attrs).write_or_raise()

    # ── Terminal queries ─────────────────────────────

    def to_list(self) -> list[Any]:
        sql = self.to_sql()
        with timed(logger, f"query {sql!r}"):
            result = self.client.query(sql)
        return extract_points(result)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.to_list())

    def empty(self) -> bool:
        return not self.to_list()

    def present(self) -> bool:
        return not self.empty()

    def delete_all(self) -> str:
        """Issue the delete form of this query and return its text."""
        sql = self.to_delete_sql()
        with timed(logger, f"delete {sql!r}"):
            self.client.query(sql)
        return sql
