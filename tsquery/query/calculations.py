"""
Aggregate / selector functions of the query language.

Each name becomes a Relation shortcut equivalent to ``calc(name, *args)``,
e.g. ``rel.percentile("value", 95)`` renders ``select percentile(value,95)``.
"""
from __future__ import annotations

from functools import partialmethod

CALCULATION_METHODS: tuple[str, ...] = (
    "count", "min", "max", "mean",
    "mode", "median", "distinct", "derivative",
    "stddev", "sum", "first", "last", "difference",
    "histogram", "percentile", "top", "bottom",
)


def install_calculations(cls: type) -> type:
    """Class decorator adding one shortcut per calculation name to *cls*."""
    for name in CALCULATION_METHODS:
        setattr(cls, name, partialmethod(cls.calc, name))
    return cls


def _class_shortcut(name: str) -> classmethod:
    def shortcut(cls, *args):
        return cls.all().calc(name, *args)
    shortcut.__name__ = name
    return classmethod(shortcut)


def install_class_calculations(cls: type) -> type:
    """Class decorator adding classmethod shortcuts that start from ``cls.all()``."""
    for name in CALCULATION_METHODS:
        setattr(cls, name, _class_shortcut(name))
    return cls
