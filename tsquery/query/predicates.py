"""
Predicate translator — turns ``field=value`` pairs into condition clauses.

Dispatch is by the value's type, at this single entry point:

  scalar   (bool / number / str / datetime / date)  -> Eq  | Neq
  pattern  (compiled ``re.Pattern``)                -> Match | Negate
  range    (``Between`` or a step-1 ``range``)      -> RangeIn | RangeOut
  array    (list / tuple / set / frozenset)         -> Eq ... or  | Neq ... and
  raw text (a bare string with no field)            -> Raw

Ranges use strict bounds on purpose: ``1..4`` renders ``f>1 and f<4``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping

from tsquery.core.errors import InvalidPredicateValue
from tsquery.query.conditions import (
    Clause,
    Condition,
    Eq,
    Match,
    Negate,
    Neq,
    RangeIn,
    RangeOut,
    Raw,
    format_value,
    pattern_literal,
)

_SCALARS = (bool, int, float, str, date)


@dataclass(frozen=True)
class Between:
    """Range predicate input with inclusive ``low``/``high`` endpoints."""
    low: Any
    high: Any


def _as_between(field: str, value: range) -> Between:
    if value.step != 1:
        raise InvalidPredicateValue(field, value, "range step must be 1")
    if len(value) == 0:
        raise InvalidPredicateValue(field, value, "empty range")
    return Between(value[0], value[-1])


def translate(field: str, value: Any, negated: bool = False) -> Clause:
    """Translate one field/value pair into a single clause."""
    if isinstance(value, re.Pattern):
        literal = pattern_literal(value)
        term: Condition = Negate(field, literal) if negated else Match(field, literal)
        return Clause((term,))

    if isinstance(value, range):
        value = _as_between(field, value)

    if isinstance(value, Between):
        low = format_value(value.low, field)
        high = format_value(value.high, field)
        term = RangeOut(field, low, high) if negated else RangeIn(field, low, high)
        return Clause((term,))

    if isinstance(value, (list, tuple, set, frozenset)):
        return _translate_array(field, value, negated)

    if isinstance(value, _SCALARS):
        literal = format_value(value, field)
        return Clause((Neq(field, literal) if negated else Eq(field, literal),))

    raise InvalidPredicateValue(field, value)


def _translate_array(field: str, values: Iterable[Any], negated: bool) -> Clause:
    if isinstance(values, (set, frozenset)):
        values = sorted(values, key=str)
    terms: list[Condition] = []
    for item in values:
        if not isinstance(item, _SCALARS):
            raise InvalidPredicateValue(field, item, "array elements must be scalars")
        literal = format_value(item, field)
        terms.append(Neq(field, literal) if negated else Eq(field, literal))
    if not terms:
        raise InvalidPredicateValue(field, values, "empty array")
    # "in" is disjunctive, "not in" is conjunctive exclusion
    return Clause(tuple(terms), joiner="and" if negated else "or")


def translate_all(
    conditions: str | Mapping[str, Any],
    negated: bool = False,
) -> list[Clause]:
    """Translate a raw string or every pair of a mapping, in order.

    Raw strings are emitted verbatim and cannot be negated.
    """
    if isinstance(conditions, str):
        if negated:
            raise InvalidPredicateValue(None, conditions, "raw text cannot be negated")
        return [Clause((Raw(conditions),))]
    if not isinstance(conditions, Mapping):
        raise InvalidPredicateValue(None, conditions, "expected a mapping or raw string")
    return [translate(str(field), value, negated) for field, value in conditions.items()]
