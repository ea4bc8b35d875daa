"""Wiring of concrete adapters, and FastAPI dependency providers."""

from __future__ import annotations

import httpx
from fastapi import Request

from archive_fetcher.infrastructure.config import Settings
from archive_fetcher.infrastructure.file_cache import FileCache
from archive_fetcher.infrastructure.forge import ForgeAdapter
from archive_fetcher.infrastructure.git_scheme import GitScheme
from archive_fetcher.infrastructure.github_adapter import GitHubAdapter
from archive_fetcher.infrastructure.gitlab_adapter import GitLabAdapter
from archive_fetcher.infrastructure.local_store import LocalStore
from archive_fetcher.services.archive_scheme import GitArchiveScheme
from archive_fetcher.services.fetch_archive import ArchiveFetcher
from archive_fetcher.services.registry import InputSchemeRegistry

_PROVIDERS: tuple[type[ForgeAdapter], ...] = (GitHubAdapter, GitLabAdapter)


def build_registry(settings: Settings, client: httpx.Client) -> InputSchemeRegistry:
    """Construct the store, cache and every scheme once, at process start.

    Access tokens are read from *settings* here and handed to the adapters;
    nothing reads them again afterwards.
    """
    store = LocalStore(settings.store_dir, client)
    cache = FileCache(settings.cache_dir, store)
    git = GitScheme()

    registry = InputSchemeRegistry()
    for provider in _PROVIDERS:
        adapter = provider(client, token=settings.token_for(provider.type))
        fetcher = ArchiveFetcher(
            adapter,
            store,
            cache,
            cache_key_includes_host=settings.cache_key_includes_host,
        )
        registry.register(GitArchiveScheme(adapter, fetcher, clone_scheme=git))
    registry.register(git)
    return registry


def get_registry(request: Request) -> InputSchemeRegistry:
    """Return the registry built by the application lifespan."""
    registry: InputSchemeRegistry | None = getattr(request.app.state, "registry", None)
    assert registry is not None, "application lifespan did not run"
    return registry
