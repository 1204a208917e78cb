"""
Series references and their rendering inside ``from`` / ``merge`` clauses.

A reference is a literal name, a compiled pattern (matched server-side), a
callable evaluated against a model instance at render time, or a list of
those.  A one-element list collapses to its element; longer lists render
as ``merge(a,b,...)``.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Sequence, Union

from tsquery.query.conditions import pattern_literal

SeriesRef = Union[str, re.Pattern, Callable[[Any], Any], Sequence[Any]]

_OUTER_QUOTES = re.compile(r"(\A['\"]|['\"]\Z)")


def quote_series(ref: SeriesRef, instance: Any = None) -> str:
    """Render *ref* for the query text.

    Parameters
    ----------
    ref : SeriesRef
        The series reference.
    instance : optional
        Passed to callable references; ``None`` when rendering a query.
    """
    if isinstance(ref, re.Pattern):
        return pattern_literal(ref)
    if callable(ref):
        return quote_series(ref(instance), instance)
    if isinstance(ref, (list, tuple)):
        if len(ref) > 1:
            return "merge(" + ",".join(quote_series(s, instance) for s in ref) + ")"
        if not ref:
            raise ValueError("Series reference list is empty")
        return quote_series(ref[0], instance)
    return '"' + str(ref).replace('"', '\\"') + '"'


def unquote_series(name: str) -> str:
    """Strip one leading and one trailing quote, as used by the write path."""
    return _OUTER_QUOTES.sub("", name)
