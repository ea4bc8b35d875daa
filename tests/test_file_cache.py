from pathlib import Path

import pytest

from archive_fetcher.domain.attrs import Attrs
from archive_fetcher.domain.entities import StorePath
from archive_fetcher.domain.exceptions import StoreError
from archive_fetcher.infrastructure.file_cache import FileCache, cache_key_digest

from conftest import REV_A


class DirStore:
    """Minimal Store: only path resolution is needed by the cache."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def to_real_path(self, store_path: StorePath) -> Path:
        return self.root / store_path.base_name


KEY = Attrs({"type": "tree-archive", "rev": REV_A})


@pytest.fixture
def stored(tmp_path: Path) -> tuple[DirStore, StorePath]:
    store = DirStore(tmp_path / "store")
    path = StorePath("abc123-source")
    (store.root / path.base_name).mkdir(parents=True)
    return store, path


def test_add_then_lookup(tmp_path: Path, stored: tuple[DirStore, StorePath]) -> None:
    store, path = stored
    cache = FileCache(tmp_path / "cache", store)

    cache.add(KEY, Attrs({"rev": REV_A, "lastModified": 42}), path)
    hit = cache.lookup(Attrs({"rev": REV_A, "type": "tree-archive"}))

    assert hit is not None
    assert hit.store_path == path
    assert hit.info == Attrs({"rev": REV_A, "lastModified": 42})


def test_entries_survive_new_cache_instance(tmp_path: Path, stored: tuple[DirStore, StorePath]) -> None:
    store, path = stored
    FileCache(tmp_path / "cache", store).add(KEY, Attrs({"lastModified": 1}), path)

    assert FileCache(tmp_path / "cache", store).lookup(KEY) is not None


def test_miss_for_unknown_key(tmp_path: Path, stored: tuple[DirStore, StorePath]) -> None:
    store, _ = stored

    assert FileCache(tmp_path / "cache", store).lookup(KEY) is None


def test_entry_for_vanished_tree_is_a_miss(tmp_path: Path, stored: tuple[DirStore, StorePath]) -> None:
    store, path = stored
    cache = FileCache(tmp_path / "cache", store)
    cache.add(KEY, Attrs({"lastModified": 1}), path)

    (store.root / path.base_name).rmdir()

    assert cache.lookup(KEY) is None


def test_add_without_overwrite_keeps_first_value(
    tmp_path: Path, stored: tuple[DirStore, StorePath]
) -> None:
    store, path = stored
    cache = FileCache(tmp_path / "cache", store)
    cache.add(KEY, Attrs({"lastModified": 1}), path)

    cache.add(KEY, Attrs({"lastModified": 2}), path, allow_overwrite=False)
    hit = cache.lookup(KEY)

    assert hit is not None
    assert hit.info["lastModified"] == 1


def test_corrupt_manifest_is_store_error(tmp_path: Path, stored: tuple[DirStore, StorePath]) -> None:
    store, _ = stored
    cache = FileCache(tmp_path / "cache", store)
    (tmp_path / "cache" / f"{cache_key_digest(KEY)}.json").write_text("{", encoding="utf-8")

    with pytest.raises(StoreError):
        cache.lookup(KEY)


def test_key_digest_is_order_independent() -> None:
    assert cache_key_digest(Attrs({"a": "1", "b": 2})) == cache_key_digest(Attrs({"b": 2, "a": "1"}))
