"""Immutable attribute bags — the universal value type for inputs and cache keys."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Union

from archive_fetcher.domain.exceptions import BadAddressError, MissingAttributeError

AttrValue = Union[str, int, bool]


class Attrs(Mapping[str, AttrValue]):
    """Read-only mapping of attribute names to ``str`` / ``int`` / ``bool``.

    Two bags are equal when they hold the same items, regardless of insertion
    order, and equal bags hash equally, so an ``Attrs`` can be used directly
    as a cache key.
    """

    __slots__ = ("_items", "_hash")

    def __init__(self, items: Mapping[str, AttrValue] | None = None, /, **kwargs: AttrValue) -> None:
        merged: dict[str, AttrValue] = dict(items or {})
        merged.update(kwargs)
        for name, value in merged.items():
            if not isinstance(name, str):
                raise BadAddressError(f"attribute name {name!r} is not a string")
            if not isinstance(value, (str, int, bool)):
                raise BadAddressError(
                    f"attribute '{name}' has unsupported value type {type(value).__name__}"
                )
        self._items = merged
        self._hash: int | None = None

    def __getitem__(self, name: str) -> AttrValue:
        return self._items[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Attrs):
            return _typed(self._items) == _typed(other._items)
        return NotImplemented

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(_typed(self._items).items()))
        return self._hash

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in sorted(self._items.items()))
        return f"Attrs({inner})"

    def updated(self, changes: Mapping[str, AttrValue]) -> Attrs:
        """Return a copy with *changes* inserted or replaced."""
        return Attrs({**self._items, **changes})

    def without(self, *names: str) -> Attrs:
        """Return a copy with *names* removed (absent names are ignored)."""
        return Attrs({k: v for k, v in self._items.items() if k not in names})

    def to_dict(self) -> dict[str, AttrValue]:
        return dict(self._items)


def _typed(items: Mapping[str, AttrValue]) -> dict[str, tuple[str, AttrValue]]:
    # True == 1 in Python; keep bools and ints distinct for equality
    return {k: (type(v).__name__, v) for k, v in items.items()}


# ── Typed accessors ─────────────────────────────────────────────────────────


def maybe_get_str_attr(attrs: Mapping[str, AttrValue], name: str) -> str | None:
    value = attrs.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadAddressError(f"attribute '{name}' is {value!r}, expected a string")
    return value


def get_str_attr(attrs: Mapping[str, AttrValue], name: str) -> str:
    value = maybe_get_str_attr(attrs, name)
    if value is None:
        raise MissingAttributeError(name)
    return value


def maybe_get_int_attr(attrs: Mapping[str, AttrValue], name: str) -> int | None:
    value = attrs.get(name)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadAddressError(f"attribute '{name}' is {value!r}, expected an integer")
    return value


def get_int_attr(attrs: Mapping[str, AttrValue], name: str) -> int:
    value = maybe_get_int_attr(attrs, name)
    if value is None:
        raise MissingAttributeError(name)
    return value
