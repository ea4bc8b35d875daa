"""Shared test fixtures."""

from __future__ import annotations

import io
import json
import tarfile
from collections.abc import Callable, Mapping
from pathlib import Path

import httpx
import pytest

from archive_fetcher.domain.attrs import Attrs
from archive_fetcher.domain.entities import CacheHit, StorePath

REV_A = "0123456789abcdef0123456789abcdef01234567"
REV_B = "fedcba9876543210fedcba9876543210fedcba98"
COMMIT_TIME = 1_690_000_000


def make_tarball(
    files: Mapping[str, bytes],
    *,
    top: str = "owner-repo-0123456",
    mtime: int = COMMIT_TIME,
) -> bytes:
    """Build a gzipped tarball shaped like a forge archive (single top directory)."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        top_info = tarfile.TarInfo(top)
        top_info.type = tarfile.DIRTYPE
        top_info.mode = 0o755
        top_info.mtime = mtime
        tf.addfile(top_info)
        for name, payload in files.items():
            info = tarfile.TarInfo(f"{top}/{name}")
            info.size = len(payload)
            info.mode = 0o644
            info.mtime = mtime
            tf.addfile(info, io.BytesIO(payload))
    return buf.getvalue()


class MemoryCache:
    """In-memory Cache used to observe what the fetcher reads and writes."""

    def __init__(self) -> None:
        self.entries: dict[Attrs, tuple[Attrs, StorePath]] = {}
        self.lookups: list[Attrs] = []
        self.adds: list[Attrs] = []

    def lookup(self, key: Attrs) -> CacheHit | None:
        self.lookups.append(key)
        entry = self.entries.get(key)
        if entry is None:
            return None
        return CacheHit(info=entry[0], store_path=entry[1])

    def add(
        self,
        key: Attrs,
        value: Attrs,
        store_path: StorePath,
        allow_overwrite: bool = True,
    ) -> None:
        self.adds.append(key)
        if key in self.entries and not allow_overwrite:
            return
        self.entries[key] = (value, store_path)


class ForgeStub:
    """Routes requests to canned forge responses and records what was asked."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def json(self, url: str, payload: object, status_code: int = 200) -> None:
        self.routes[url] = lambda request: httpx.Response(
            status_code, content=json.dumps(payload).encode()
        )

    def tarball(self, url: str, payload: bytes) -> None:
        self.routes[url] = lambda request: httpx.Response(200, content=payload)

    def respond(self, url: str, response: httpx.Response) -> None:
        self.routes[url] = lambda request: response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, content=b'{"message": "Not Found"}')
        return route(request)

    def urls(self) -> list[str]:
        return [str(request.url) for request in self.requests]


@pytest.fixture
def forge() -> ForgeStub:
    return ForgeStub()


@pytest.fixture
def client(forge: ForgeStub) -> httpx.Client:
    with httpx.Client(transport=httpx.MockTransport(forge.handler)) as c:
        yield c


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    return tmp_path / "store"
