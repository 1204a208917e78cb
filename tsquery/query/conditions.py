"""
Condition expressions — the immutable predicate terms of a where-clause.

Each term stores its field and the already-rendered literal(s), so rendering
never fails after a term has been created.  Terms produced for one predicate
pair are grouped into a ``Clause`` which renders parenthesised; clauses are
joined by ``and`` in insertion order.
"""
from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Union

from tsquery.core.errors import InvalidPredicateValue

_UNESCAPED_SLASH = re.compile(r"(?<!\\)/")


# ── Literal formatting ───────────────────────────────────

def epoch_seconds(value: datetime | date) -> int:
    """Whole seconds since the epoch; naive datetimes and dates are UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    return calendar.timegm(value.timetuple())


def pattern_literal(pattern: re.Pattern) -> str:
    """Render a compiled regex as the native ``/source/`` literal."""
    source = pattern.pattern
    if isinstance(source, bytes):
        source = source.decode()
    flags = "i" if pattern.flags & re.IGNORECASE else ""
    return "/" + _UNESCAPED_SLASH.sub(r"\/", source) + "/" + flags


def quote_string(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def format_value(value: object, field: str | None = None) -> str:
    """Render a scalar predicate value as a query literal.

    Raises
    ------
    InvalidPredicateValue
        If *value* is not a bool, number, string, datetime or date.
    """
    # bool before int: True is an int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, (datetime, date)):
        return f"{epoch_seconds(value)}s"
    raise InvalidPredicateValue(field, value)


# ── Terms ────────────────────────────────────────────────

@dataclass(frozen=True)
class Eq:
    field: str
    value: str

    def render(self) -> str:
        return f"{self.field}={self.value}"


@dataclass(frozen=True)
class Neq:
    field: str
    value: str

    def render(self) -> str:
        return f"{self.field}<>{self.value}"


@dataclass(frozen=True)
class RangeIn:
    """Strict bounds: ``field>low and field<high``."""
    field: str
    low: str
    high: str

    def render(self) -> str:
        return f"{self.field}>{self.low} and {self.field}<{self.high}"


@dataclass(frozen=True)
class RangeOut:
    field: str
    low: str
    high: str

    def render(self) -> str:
        return f"{self.field}<{self.low} and {self.field}>{self.high}"


@dataclass(frozen=True)
class Match:
    field: str
    pattern: str

    def render(self) -> str:
        return f"{self.field}=~{self.pattern}"


@dataclass(frozen=True)
class Negate:
    field: str
    pattern: str

    def render(self) -> str:
        return f"{self.field}!~{self.pattern}"


@dataclass(frozen=True)
class Raw:
    text: str

    def render(self) -> str:
        return self.text


Condition = Union[Eq, Neq, RangeIn, RangeOut, Match, Negate, Raw]


@dataclass(frozen=True)
class Clause:
    """One parenthesised group of terms, joined by *joiner*."""
    terms: tuple[Condition, ...]
    joiner: str = "and"

    def render(self) -> str:
        return "(" + f" {self.joiner} ".join(t.render() for t in self.terms) + ")"
