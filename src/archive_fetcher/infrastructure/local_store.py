"""Directory-backed, content-addressed store for downloaded trees and files.

Every object lives at ``<root>/<digest>-<name>`` where ``digest`` is derived
from the unpacked content, so identical trees share one entry no matter
which URL produced them.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import os
import shutil
import stat
import tarfile
import tempfile
import time
from collections.abc import Mapping
from email.utils import parsedate_to_datetime
from pathlib import Path, PurePosixPath
from typing import Any

import httpx

from archive_fetcher.domain.entities import DownloadResult, StorePath
from archive_fetcher.domain.exceptions import StoreError, TransportError
from archive_fetcher.infrastructure.http import check_status

logger = logging.getLogger(__name__)

_DIGEST_CHARS = 32
_CHUNK_SIZE = 64 * 1024


class LocalStore:
    """Concrete Store keeping objects in a local directory."""

    def __init__(self, root: str | Path, client: httpx.Client) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._client = client

    def to_real_path(self, store_path: StorePath) -> Path:
        return self.root / store_path.base_name

    def download_tarball(
        self,
        url: str,
        headers: Mapping[str, str],
        name: str = "source",
        unpack: bool = True,
    ) -> DownloadResult:
        """Download *url*, unpack it and add the top-level directory to the store."""
        if not unpack:
            return self.download_file(url, headers, name=name)

        temp_root = Path(tempfile.mkdtemp(prefix=".tmp-", dir=str(self.root)))
        try:
            archive = temp_root / "archive"
            self._download_to(url, headers, archive)
            unpacked = temp_root / "unpacked"
            last_modified = _unpack(archive, unpacked, url=url)
            top = _single_top_dir(unpacked)
            store_path = StorePath(f"{tree_digest(top)[:_DIGEST_CHARS]}-{name}")
            self._add(top, store_path)
        finally:
            shutil.rmtree(temp_root, ignore_errors=True)

        logger.info("Unpacked %s into %s", url, store_path)
        return DownloadResult(store_path=store_path, last_modified=last_modified)

    def download_file(
        self,
        url: str,
        headers: Mapping[str, str],
        name: str = "source",
        unpack: bool = False,
    ) -> DownloadResult:
        """Download *url* as a single file."""
        if unpack:
            return self.download_tarball(url, headers, name=name)

        temp_root = Path(tempfile.mkdtemp(prefix=".tmp-", dir=str(self.root)))
        try:
            target = temp_root / name
            resp_headers = self._download_to(url, headers, target)
            store_path = StorePath(f"{tree_digest(target)[:_DIGEST_CHARS]}-{name}")
            self._add(target, store_path)
        finally:
            shutil.rmtree(temp_root, ignore_errors=True)

        return DownloadResult(
            store_path=store_path,
            last_modified=_last_modified_header(resp_headers),
        )

    def content_hash(self, store_path: StorePath) -> str:
        path = self.to_real_path(store_path)
        if not path.exists() and not path.is_symlink():
            raise StoreError(f"store path '{store_path}' does not exist")
        digest = bytes.fromhex(tree_digest(path))
        return "sha256-" + base64.b64encode(digest).decode("ascii")

    # ── Internals ───────────────────────────────────────────────────────

    def _download_to(self, url: str, headers: Mapping[str, str], target: Path) -> httpx.Headers:
        try:
            with self._client.stream("GET", url, headers=dict(headers)) as resp:
                check_status(resp, url)
                with target.open("wb") as fh:
                    for chunk in resp.iter_bytes(_CHUNK_SIZE):
                        fh.write(chunk)
                return resp.headers
        except httpx.HTTPError as exc:
            raise TransportError(f"Network error fetching {url}: {exc}") from exc

    def _add(self, source: Path, store_path: StorePath) -> None:
        destination = self.to_real_path(store_path)
        if destination.exists():
            # Same digest, same content: a concurrent or earlier download won
            return
        try:
            os.replace(source, destination)
        except OSError as exc:
            if destination.exists():
                return
            raise StoreError(f"cannot add '{store_path}' to store at {self.root}: {exc}") from exc


def _unpack(archive: Path, dest: Path, *, url: str) -> int:
    """Extract *archive* into *dest* and return its last-modified timestamp."""
    try:
        with tarfile.open(archive, mode="r:*") as tf:
            members = tf.getmembers()
            tf.extractall(dest, filter="tar")
    except tarfile.TarError as exc:
        raise StoreError(f"'{url}' is not a valid tarball: {exc}") from exc

    if not members:
        raise StoreError(f"tarball '{url}' is empty")
    return _archive_timestamp(members)


def _archive_timestamp(members: list[tarfile.TarInfo]) -> int:
    # Forges stamp the top-level directory with the commit time
    parts = PurePosixPath(members[0].name).parts
    top = parts[0] if parts else ""
    for member in members:
        if member.isdir() and member.name.rstrip("/") == top:
            return int(member.mtime)
    return int(max(member.mtime for member in members))


def _single_top_dir(unpacked: Path) -> Path:
    entries = list(unpacked.iterdir())
    if len(entries) == 1 and entries[0].is_dir() and not entries[0].is_symlink():
        return entries[0]
    return unpacked


def _last_modified_header(headers: httpx.Headers) -> int:
    raw = headers.get("last-modified")
    if raw:
        try:
            return int(parsedate_to_datetime(raw).timestamp())
        except (TypeError, ValueError):
            logger.debug("Ignoring unparsable Last-Modified header %r", raw)
    return int(time.time())


def tree_digest(path: Path) -> str:
    """SHA-256 over a file or directory tree, independent of timestamps and ownership.

    Each entry contributes its kind, relative path, executable bit and
    content (or link target), in sorted path order.
    """
    h = hashlib.sha256()
    if path.is_file() and not path.is_symlink():
        _hash_entry(h, path, "")
        return h.hexdigest()
    for entry in sorted(path.rglob("*"), key=lambda p: p.relative_to(path).as_posix()):
        _hash_entry(h, entry, entry.relative_to(path).as_posix())
    return h.hexdigest()


def _hash_entry(h: Any, entry: Path, rel: str) -> None:
    if entry.is_symlink():
        h.update(b"l\0" + rel.encode() + b"\0" + os.readlink(entry).encode() + b"\0")
    elif entry.is_dir():
        h.update(b"d\0" + rel.encode() + b"\0")
    else:
        executable = b"x" if entry.stat().st_mode & stat.S_IXUSR else b"-"
        file_hash = hashlib.sha256()
        with entry.open("rb") as fh:
            for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
                file_hash.update(chunk)
        h.update(b"f\0" + rel.encode() + b"\0" + executable + file_hash.digest())
