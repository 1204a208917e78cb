"""
Error hierarchy for query building and point writes.

Predicate and serialization errors are programmer errors and are raised
immediately.  Validation failures are only raised on the strict write path;
the lenient path reports them as ``False``.  Client I/O errors are never
wrapped here.
"""
from __future__ import annotations


class MetricsError(Exception):
    """Base class for all errors raised by tsquery."""


class InvalidPredicateValue(MetricsError, TypeError):
    """A ``where`` value has a type the predicate translator cannot render."""

    def __init__(self, field: str | None, value: object, reason: str = "unsupported value type"):
        self.field = field
        self.value = value
        label = f"'{field}'" if field else "predicate"
        super().__init__(f"Invalid value for {label}: {value!r} ({reason})")


class DoubleWriteError(MetricsError):
    """A write was attempted on an instance that is already persisted."""


class ValidationFailed(MetricsError):
    """The model failed validation on a strict write path."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Validation failed: " + "; ".join(self.errors))


class UnknownAttributeError(MetricsError, AttributeError):
    """An attribute name is neither a declared tag nor a declared value."""


class AmbiguousMergeTarget(MetricsError):
    """Reserved: merge resolves series targets by union and never raises this."""
