"""
Serializer — renders QueryState into the datastore's query text.

Assembly order (each section omitted when empty):

  select <fields | calculation> from <series>[ merge <target>...]
      [ where <clause> and ...][ group by <terms>[ fill(<policy>)]]
      [ limit <n>][ offset <n>]

A fill policy without a time bucket or group fields is rejected with
``ValueError``.

The delete form replaces ``select <fields>`` with ``delete`` and shares
everything after the verb.  The output is a wire contract: field order,
spacing and quoting must stay byte-for-byte stable.
"""
from __future__ import annotations

from tsquery.core.logging import get_logger
from tsquery.query.series import quote_series
from tsquery.query.state import QueryState

logger = get_logger(__name__)


def _projection(state: QueryState) -> str:
    # calculation wins over explicit select fields
    if state.calculation is not None:
        return state.calculation.render()
    if state.select_fields:
        return ",".join(state.select_fields)
    return "*"


def _body(state: QueryState) -> str:
    parts: list[str] = [f"from {quote_series(state.series)}"]

    for target in state.merge_targets:
        parts.append(f"merge {quote_series(target)}")

    predicates = state.predicates()
    if predicates:
        parts.append("where " + " and ".join(c.render() for c in predicates))

    terms = state.group.terms()
    if state.group.fill is not None and not terms:
        raise ValueError(f"fill({state.group.fill}) requires a time bucket or group fields")
    if terms:
        group = "group by " + ",".join(terms)
        if state.group.fill is not None:
            group += f" fill({state.group.fill})"
        parts.append(group)

    if state.limit is not None:
        parts.append(f"limit {state.limit}")
    if state.offset is not None:
        parts.append(f"offset {state.offset}")

    return " ".join(parts)


def render_select(state: QueryState) -> str:
    sql = f"select {_projection(state)} {_body(state)}"
    logger.debug("Rendered select: %s", sql)
    return sql


def render_delete(state: QueryState) -> str:
    sql = f"delete {_body(state)}"
    logger.debug("Rendered delete: %s", sql)
    return sql
