"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from archive_fetcher.domain.attrs import (
    Attrs,
    AttrValue,
    get_str_attr,
    maybe_get_int_attr,
    maybe_get_str_attr,
)
from archive_fetcher.domain.value_objects import Revision


@dataclass(frozen=True, slots=True)
class Input:
    """A fully or partially specified address of a remote repository.

    Wraps an :class:`Attrs` bag.  Inputs are values: every change produces
    a new ``Input`` and the one handed out is never modified.
    """

    attrs: Attrs

    @classmethod
    def from_mapping(cls, attrs: dict[str, AttrValue] | Attrs) -> Input:
        return cls(attrs if isinstance(attrs, Attrs) else Attrs(attrs))

    @property
    def type(self) -> str:
        return get_str_attr(self.attrs, "type")

    @property
    def owner(self) -> str:
        return get_str_attr(self.attrs, "owner")

    @property
    def repo(self) -> str:
        return get_str_attr(self.attrs, "repo")

    @property
    def ref(self) -> str | None:
        return maybe_get_str_attr(self.attrs, "ref")

    @property
    def rev(self) -> Revision | None:
        raw = maybe_get_str_attr(self.attrs, "rev")
        return Revision.parse(raw) if raw is not None else None

    @property
    def host(self) -> str | None:
        return maybe_get_str_attr(self.attrs, "host")

    @property
    def nar_hash(self) -> str | None:
        return maybe_get_str_attr(self.attrs, "narHash")

    @property
    def last_modified(self) -> int | None:
        return maybe_get_int_attr(self.attrs, "lastModified")

    def with_attrs(self, **changes: AttrValue | None) -> Input:
        """Return a new Input; a ``None`` value removes that attribute."""
        removed = [name for name, value in changes.items() if value is None]
        kept = {name: value for name, value in changes.items() if value is not None}
        return Input(self.attrs.without(*removed).updated(kept))


@dataclass(frozen=True, slots=True)
class StorePath:
    """Store-relative name of a stored object, ``<digest>-<name>``."""

    base_name: str

    @property
    def digest(self) -> str:
        return self.base_name.split("-", 1)[0]

    @property
    def name(self) -> str:
        return self.base_name.split("-", 1)[1] if "-" in self.base_name else ""

    def __str__(self) -> str:
        return self.base_name


@dataclass(frozen=True, slots=True)
class Tree:
    """An unpacked source tree held by the store."""

    actual_path: Path
    store_path: StorePath


@dataclass(frozen=True, slots=True)
class DownloadResult:
    """What the store hands back after a download: the object and its timestamp."""

    store_path: StorePath
    last_modified: int


@dataclass(frozen=True, slots=True)
class CacheHit:
    """A cache lookup result: stored metadata and the tree it describes."""

    info: Attrs
    store_path: StorePath
