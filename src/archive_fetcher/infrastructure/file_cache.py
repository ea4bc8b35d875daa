"""Persistent fetcher cache — one JSON manifest per immutable key."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from archive_fetcher.domain.attrs import Attrs
from archive_fetcher.domain.entities import CacheHit, StorePath
from archive_fetcher.domain.exceptions import StoreError
from archive_fetcher.domain.ports.store import Store

logger = logging.getLogger(__name__)


def cache_key_digest(key: Attrs) -> str:
    """Stable file name for *key*: SHA-256 of its canonical JSON."""
    canonical = json.dumps(key.to_dict(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class FileCache:
    """Concrete Cache storing manifests under ``<root>/<key digest>.json``.

    Entries whose tree has disappeared from *store* are treated as misses.
    """

    def __init__(self, root: str | Path, store: Store) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._store = store

    def lookup(self, key: Attrs) -> CacheHit | None:
        manifest_path = self.root / f"{cache_key_digest(key)}.json"
        if not manifest_path.exists():
            return None

        manifest = self._read_manifest(manifest_path)
        if manifest.get("key") != key.to_dict():
            raise StoreError(
                f"cache manifest {manifest_path} does not belong to key {key!r}"
            )
        store_path = StorePath(str(manifest["storePath"]))
        if not self._store.to_real_path(store_path).exists():
            logger.debug("Cached tree %s for %r is gone from the store", store_path, key)
            return None
        return CacheHit(info=Attrs(manifest["value"]), store_path=store_path)

    def add(
        self,
        key: Attrs,
        value: Attrs,
        store_path: StorePath,
        allow_overwrite: bool = True,
    ) -> None:
        manifest_path = self.root / f"{cache_key_digest(key)}.json"
        if manifest_path.exists() and not allow_overwrite:
            return

        manifest = {
            "key": key.to_dict(),
            "value": value.to_dict(),
            "storePath": store_path.base_name,
        }
        fd, temp_name = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=str(self.root))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(manifest, indent=2, sort_keys=True) + "\n")
            os.replace(temp_name, manifest_path)
        except OSError as exc:
            Path(temp_name).unlink(missing_ok=True)
            raise StoreError(f"cannot write cache manifest {manifest_path}: {exc}") from exc
        logger.debug("Cached %r -> %s", key, store_path)

    def _read_manifest(self, path: Path) -> dict[str, Any]:
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StoreError(f"cache manifest {path} is not valid JSON") from exc
        if (
            not isinstance(parsed, dict)
            or not isinstance(parsed.get("value"), dict)
            or "storePath" not in parsed
        ):
            raise StoreError(f"cache manifest {path} has invalid structure")
        return parsed
