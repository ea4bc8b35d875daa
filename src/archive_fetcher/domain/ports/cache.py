"""Port: key/value cache for memoized fetches."""

from __future__ import annotations

from typing import Protocol

from archive_fetcher.domain.attrs import Attrs
from archive_fetcher.domain.entities import CacheHit, StorePath


class Cache(Protocol):
    """Maps immutable attribute sets to metadata plus a stored tree."""

    def lookup(self, key: Attrs) -> CacheHit | None:
        ...

    def add(
        self,
        key: Attrs,
        value: Attrs,
        store_path: StorePath,
        allow_overwrite: bool = True,
    ) -> None:
        ...
