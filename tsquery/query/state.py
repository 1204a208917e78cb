"""
Query state held by a Relation, and the merge algorithm over two states.

Merge policy, receiver <- other:

  where clauses      concatenate (receiver's, then other's)
  group fields       concatenate
  group time bucket  other's wins if set
  fill               other's wins if set
  select fields      other's replaces receiver's only if non-empty
  limit / offset     other's wins if set
  time window        other's wins if set
  calculation        other's wins if set
  merge targets      union: other's primary series (when different), then
                     other's merge targets, skipping ones already present
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from tsquery.query.conditions import Clause, Raw
from tsquery.query.series import SeriesRef


@dataclass(frozen=True)
class Calculation:
    name: str
    args: tuple[Any, ...] = ()

    def render(self) -> str:
        return f"{self.name}(" + ",".join(str(a) for a in self.args) + ")"


@dataclass
class GroupSpec:
    fields: list[str] = field(default_factory=list)
    bucket: str | None = None
    fill: str | None = None

    def terms(self) -> list[str]:
        """Group-by terms; the time bucket always comes first."""
        head = [f"time({self.bucket})"] if self.bucket else []
        return head + self.fields


@dataclass
class QueryState:
    series: SeriesRef
    select_fields: list[str] = field(default_factory=list)
    where_clauses: list[Clause] = field(default_factory=list)
    group: GroupSpec = field(default_factory=GroupSpec)
    time_window: Raw | None = None
    limit: int | None = None
    offset: int | None = None
    merge_targets: list[SeriesRef] = field(default_factory=list)
    calculation: Calculation | None = None

    def clone(self) -> "QueryState":
        return copy.deepcopy(self)

    def predicates(self) -> list[Clause]:
        """Where clauses in render order; the time window is appended last."""
        if self.time_window is None:
            return list(self.where_clauses)
        return self.where_clauses + [Clause((self.time_window,))]


def merge_states(into: QueryState, other: QueryState) -> QueryState:
    """Merge *other* into *into* in place and return *into*."""
    into.where_clauses.extend(other.where_clauses)

    into.group.fields.extend(other.group.fields)
    if other.group.bucket is not None:
        into.group.bucket = other.group.bucket
    if other.group.fill is not None:
        into.group.fill = other.group.fill

    if other.select_fields:
        into.select_fields = list(other.select_fields)

    if other.limit is not None:
        into.limit = other.limit
    if other.offset is not None:
        into.offset = other.offset
    if other.time_window is not None:
        into.time_window = other.time_window
    if other.calculation is not None:
        into.calculation = other.calculation

    candidates = [other.series] + other.merge_targets
    for target in candidates:
        if target == into.series or target in into.merge_targets:
            continue
        into.merge_targets.append(target)
    return into
