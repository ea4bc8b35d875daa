"""Port: content-addressed store for fetched trees."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from archive_fetcher.domain.entities import DownloadResult, StorePath


class Store(Protocol):
    """Holds downloaded objects under stable, content-derived paths."""

    def to_real_path(self, store_path: StorePath) -> Path:
        """Return the filesystem location of *store_path*."""
        ...

    def download_tarball(
        self,
        url: str,
        headers: Mapping[str, str],
        name: str = "source",
        unpack: bool = True,
    ) -> DownloadResult:
        """Download a tarball, unpack it and add the tree to the store."""
        ...

    def download_file(
        self,
        url: str,
        headers: Mapping[str, str],
        name: str = "source",
        unpack: bool = False,
    ) -> DownloadResult:
        """Download a single file into the store."""
        ...

    def content_hash(self, store_path: StorePath) -> str:
        """Return the SRI content hash (``sha256-...``) of a stored object."""
        ...
