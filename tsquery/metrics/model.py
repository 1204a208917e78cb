"""
Metrics -- base class for querying and writing one series.

A subclass declares its tag and value names, optional validators, write
hooks and a default scope:

    class CpuMetrics(Metrics):
        tag_names = ("host",)
        value_names = ("load",)
        validators = (validates_presence_of("host", "load"),)

    CpuMetrics.where(host="web-1").past("hour").to_sql()
    CpuMetrics(host="web-1", load=0.4).write()

The client, when given, is the only positional argument, so tags and
values may use any name (``Metrics(client, client="a")`` included).
Calculation shortcuts (``CpuMetrics.count("load")``) are available on the
class as well as on relations.

The series defaults to the snake-cased class name without its ``Metrics``
suffix (``CpuMetrics`` -> ``"cpu"``).
"""
from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Callable, ClassVar, Iterable

from tsquery.core.errors import DoubleWriteError, UnknownAttributeError, ValidationFailed
from tsquery.core.logging import get_logger
from tsquery.core.utils import timed
from tsquery.db.client import Client, get_default_client
from tsquery.metrics.write_point import encode_write_point
from tsquery.query.calculations import install_class_calculations
from tsquery.query.conditions import epoch_seconds
from tsquery.query.relation import Relation
from tsquery.query.series import SeriesRef, quote_series, unquote_series

logger = get_logger(__name__)

Validator = Callable[["Metrics"], Iterable[str]]
Hook = Callable[["Metrics"], Any]

_SUFFIX_RE = re.compile(r"^(.*)Metrics$")


def _underscore(name: str) -> str:
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", name)
    return name.lower()


def _merged(parent: Iterable[str], own: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys([*parent, *own]))


def validates_presence_of(*names: str) -> Validator:
    """Validator requiring each attribute in *names* to be set and non-blank."""
    def check(instance: "Metrics") -> list[str]:
        errors = []
        for name in names:
            value = instance[name]
            if value is None or (isinstance(value, str) and not value.strip()):
                errors.append(f"{name} can't be blank")
        return errors
    return check


@install_class_calculations
class Metrics:
    series: ClassVar[SeriesRef | None] = None
    tag_names: ClassVar[tuple[str, ...]] = ()
    value_names: ClassVar[tuple[str, ...]] = ()
    validators: ClassVar[tuple[Validator, ...]] = ()
    before_write: ClassVar[tuple[Hook, ...]] = ()
    after_write: ClassVar[tuple[Hook, ...]] = ()
    default_scope: ClassVar[Callable[[Relation], Relation] | None] = None
    client: ClassVar[Client | None] = None

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        parent = cls.__mro__[1]
        cls.tag_names = _merged(getattr(parent, "tag_names", ()), cls.__dict__.get("tag_names", ()))
        cls.value_names = _merged(getattr(parent, "value_names", ()), cls.__dict__.get("value_names", ()))
        if "series" not in cls.__dict__:
            cls.series = cls._default_series(parent)

    @classmethod
    def _default_series(cls, parent: type) -> SeriesRef:
        match = _SUFFIX_RE.match(cls.__name__)
        if match and match.group(1):
            return _underscore(match.group(1))
        inherited = getattr(parent, "series", None)
        return inherited if inherited is not None else _underscore(cls.__name__)

    # ── Class-level query entry points ───────────────

    @classmethod
    def get_client(cls) -> Client:
        return cls.client if cls.client is not None else get_default_client()

    @classmethod
    def all(cls) -> Relation:
        """A new Relation for this class, seeded by ``default_scope`` if set."""
        relation = Relation(cls)
        if cls.default_scope is not None:
            relation = cls.default_scope(relation)
        return relation

    @classmethod
    def select(cls, *fields: str) -> Relation:
        return cls.all().select(*fields)

    @classmethod
    def where(cls, conditions: Any = None, /, **kwargs: Any):
        return cls.all().where(conditions, **kwargs)

    @classmethod
    def not_(cls, conditions: Any = None, /, **kwargs: Any) -> Relation:
        return cls.all().not_(conditions, **kwargs)

    @classmethod
    def group(cls, *fields: str) -> Relation:
        return cls.all().group(*fields)

    @classmethod
    def past(cls, duration: Any) -> Relation:
        return cls.all().past(duration)

    @classmethod
    def since(cls, instant: datetime | date) -> Relation:
        return cls.all().since(instant)

    @classmethod
    def limit(cls, n: int) -> Relation:
        return cls.all().limit(n)

    @classmethod
    def offset(cls, n: int) -> Relation:
        return cls.all().offset(n)

    @classmethod
    def group_by_time(cls, duration: Any, fill: Any = None) -> Relation:
        """Class-level ``Relation.time``; the name ``time`` belongs to instances."""
        return cls.all().time(duration, fill=fill)

    @classmethod
    def fill(cls, value: Any) -> Relation:
        return cls.all().fill(value)

    @classmethod
    def merge(cls, other: Any) -> Relation:
        return cls.all().merge(other)

    @classmethod
    def calc(cls, name: str, *args: Any) -> Relation:
        return cls.all().calc(name, *args)

    @classmethod
    def delete_all(cls) -> str:
        return cls.all().delete_all()

    @classmethod
    def create(cls, /, **attrs: Any) -> "Metrics | bool":
        return cls.all().write(**attrs)

    @classmethod
    def create_or_raise(cls, /, **attrs: Any) -> "Metrics":
        return cls.all().write_or_raise(**attrs)

    # ── Instance ─────────────────────────────────────

    def __init__(self, client: Client | None = None, /, **attrs: Any):
        self._attributes: dict[str, Any] = {}
        self._time: int | None = None
        self._persisted = False
        self._client = client
        self.errors: list[str] = []
        for name, value in attrs.items():
            if name == "time":
                self.time = value
            else:
                self[name] = value

    def _check_name(self, name: str) -> None:
        if name not in self.tag_names and name not in self.value_names:
            raise UnknownAttributeError(
                f"'{name}' is not a declared tag or value of {type(self).__name__}"
            )

    def __getitem__(self, name: str) -> Any:
        self._check_name(name)
        return self._attributes.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self._check_name(name)
        self._attributes[name] = value

    @property
    def attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def values(self) -> dict[str, Any]:
        return {k: v for k, v in self._attributes.items() if k in self.value_names}

    def tags(self) -> dict[str, Any]:
        return {k: v for k, v in self._attributes.items() if k in self.tag_names}

    @property
    def persisted(self) -> bool:
        return self._persisted

    def active_client(self) -> Client:
        return self._client if self._client is not None else self.get_client()

    def quoted_series(self) -> str:
        return quote_series(type(self).series, self)

    def copy(self) -> "Metrics":
        """Unpersisted instance with the same attributes (time is not copied)."""
        return type(self)(self._client, **self._attributes)

    # ── Time ─────────────────────────────────────────

    @property
    def time(self) -> int | None:
        """Point timestamp, scaled to the client's time precision."""
        return self._time

    @time.setter
    def time(self, value: datetime | date | int | None) -> None:
        if value is None:
            self._time = None
        elif isinstance(value, (datetime, date)):
            self._time = self._scale(value)
        elif isinstance(value, int) and not isinstance(value, bool):
            self._time = value
        else:
            raise TypeError(f"Unsupported time value: {value!r}")

    def _scale(self, value: datetime | date) -> int:
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            seconds = value.timestamp()
        else:
            seconds = float(epoch_seconds(value))
        if self.active_client().time_precision == "ms":
            return int(seconds * 1_000)
        return int(seconds)

    def parsed_time(self) -> datetime | None:
        if self._time is None:
            return None
        if self.active_client().time_precision == "ms":
            return datetime.fromtimestamp(self._time / 1_000.0, tz=timezone.utc)
        return datetime.fromtimestamp(self._time, tz=timezone.utc)

    # ── Validation & writes ──────────────────────────

    def is_valid(self) -> bool:
        self.errors = [msg for validator in self.validators for msg in validator(self)]
        return not self.errors

    def write(self) -> "Metrics | bool":
        """Write this point; ``False`` when invalid.

        Raises
        ------
        DoubleWriteError
            If the instance was already written.
        """
        if self._persisted:
            raise DoubleWriteError(f"{type(self).__name__} instance is already persisted")
        if not self.is_valid():
            logger.warning("Skipping write for %s: %s", type(self).__name__, self.errors)
            return False
        self._run_with_hooks(self._write_point)
        return self

    def write_or_raise(self) -> "Metrics":
        if not self.is_valid():
            raise ValidationFailed(self.errors)
        return self.write()

    def _run_with_hooks(self, action: Callable[[], None]) -> None:
        # after-hooks only run when the action returned normally
        for hook in self.before_write:
            hook(self)
        action()
        for hook in self.after_write:
            hook(self)

    def _write_point(self) -> None:
        point = encode_write_point(self)
        series = unquote_series(self.quoted_series())
        with timed(logger, f"write_point {series}"):
            self.active_client().write_point(series, point.to_params())
        self._persisted = True
