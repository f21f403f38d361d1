"""Value snapshots and field accessors.

A Values snapshot is what timelines and animators hand back to the
application: an immutable mapping from field name to value, readable by key
or by attribute.

The application decides which fields of its own structures are animated by
describing them with a FieldSet: a fixed, ordered collection of getter/setter
pairs. The engine never reflects over arbitrary attributes.

Usage:
    @dataclass
    class Style:
        x: float = 0.0
        opacity: float = 1.0

    fields = FieldSet.from_dataclass(Style)
    style = Style()
    fields.apply(style, timeline.value_at(0.25))
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Generic, Iterable, Iterator, Mapping, TypeVar

import numpy as np

T = TypeVar("T")


class Values(Mapping[str, Any]):
    """
    Immutable snapshot of field values.

    Fields are read as values["x"] or values.x. Names that clash with Mapping
    methods (keys, items, get, ...) are only reachable by key.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | Iterable[tuple[str, Any]] = (), **fields: Any):
        merged = dict(data)
        merged.update(fields)
        object.__setattr__(self, "_data", merged)

    def __getitem__(self, name: str) -> Any:
        return self._data[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"Values has no field '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Values is immutable")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        if self._data.keys() != other.keys():
            return False
        return all(_same(value, other[name]) for name, value in self._data.items())

    __hash__ = None

    def __reduce__(self):
        return (Values, (self._data,))

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v!r}" for k, v in self._data.items())
        return f"Values({body})"

    def merged(self, other: Mapping[str, Any]) -> "Values":
        """New snapshot with values from other taking precedence."""
        data = dict(self._data)
        data.update(other)
        return Values(data)

    def replace(self, **fields: Any) -> "Values":
        return self.merged(fields)

    def only(self, names: Iterable[str]) -> "Values":
        """New snapshot restricted to names present in this one."""
        return Values((name, self._data[name]) for name in names if name in self._data)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)


def _same(a: Any, b: Any) -> bool:
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return bool(np.array_equal(a, b))
    return bool(a == b)


EMPTY = Values()


class Field(Generic[T]):
    """Getter/setter pair for one animated field of a T instance."""

    __slots__ = ("name", "get", "set")

    def __init__(self, name: str, get: Callable[[T], Any], set: Callable[[T, Any], None]):
        self.name = name
        self.get = get
        self.set = set

    @classmethod
    def attribute(cls, name: str, attr: str | None = None) -> "Field[Any]":
        """Field backed by a plain attribute (attr defaults to name)."""
        attr = attr or name
        return cls(
            name,
            lambda target: getattr(target, attr),
            lambda target, value: setattr(target, attr, value),
        )

    def __repr__(self) -> str:
        return f"Field({self.name!r})"


class FieldSet(Generic[T]):
    """
    Fixed, ordered set of animated fields of a structure.

    Usage:
        fields = FieldSet.attributes("x", "y")
        values = fields.capture(sprite)     # read
        fields.apply(sprite, new_values)    # write back
    """

    def __init__(self, fields: Iterable[Field[T]]):
        self._fields: dict[str, Field[T]] = {}
        for field in fields:
            if field.name in self._fields:
                raise ValueError(f"Duplicate field '{field.name}'")
            self._fields[field.name] = field

    @classmethod
    def attributes(cls, *names: str) -> "FieldSet[Any]":
        return cls(Field.attribute(name) for name in names)

    @classmethod
    def from_dataclass(cls, datacls: type, *names: str) -> "FieldSet[Any]":
        """Fields of a dataclass; all of them unless names are given."""
        if not dataclasses.is_dataclass(datacls):
            raise TypeError(f"{datacls!r} is not a dataclass")
        known = [f.name for f in dataclasses.fields(datacls)]
        if names:
            unknown = [n for n in names if n not in known]
            if unknown:
                raise ValueError(f"{datacls.__name__} has no fields {unknown}")
            known = list(names)
        return cls.attributes(*known)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._fields)

    def __contains__(self, name: str) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[Field[T]]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __getitem__(self, name: str) -> Field[T]:
        return self._fields[name]

    def capture(self, target: T) -> Values:
        """Read current values of all fields from target."""
        return Values((field.name, field.get(target)) for field in self._fields.values())

    def apply(self, target: T, values: Mapping[str, Any]) -> None:
        """Write values into target. Every name in values must be a known field."""
        for name, value in values.items():
            try:
                field = self._fields[name]
            except KeyError:
                raise KeyError(f"Field '{name}' is not animated on {type(target).__name__}") from None
            field.set(target, value)
