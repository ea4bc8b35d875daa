"""HTTP helpers shared by the provider adapters and the store."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone

import httpx

from archive_fetcher.domain.exceptions import (
    AccessDeniedError,
    RateLimitError,
    RepositoryNotFoundError,
    TransportError,
)

logger = logging.getLogger(__name__)

USER_AGENT = "archive-fetcher/1.0"


def build_client(timeout: float = 30.0) -> httpx.Client:
    """Create the process-wide client; redirects are followed (tarball endpoints redirect)."""
    return httpx.Client(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )


def api_get(
    client: httpx.Client,
    url: str,
    headers: Mapping[str, str] | None = None,
) -> httpx.Response:
    """Perform a GET request with error translation."""
    try:
        resp = client.get(url, headers=dict(headers or {}))
    except httpx.HTTPError as exc:
        raise TransportError(f"Network error fetching {url}: {exc}") from exc

    check_status(resp, url)
    return resp


def check_status(resp: httpx.Response, url: str) -> None:
    """Raise the domain error matching a non-2xx response."""
    if resp.is_success:
        return

    if resp.status_code == 404:
        raise RepositoryNotFoundError(f"'{url}' was not found (HTTP 404).")

    if resp.status_code == 403:
        remaining = resp.headers.get("x-ratelimit-remaining", "")
        if remaining == "0":
            reset_raw = resp.headers.get("x-ratelimit-reset", "")
            try:
                reset_str = datetime.fromtimestamp(int(reset_raw), tz=timezone.utc).strftime(
                    "%Y-%m-%d %H:%M:%S UTC"
                )
            except (ValueError, OSError):
                reset_str = reset_raw or "unknown"
            raise RateLimitError(
                f"API rate limit exceeded fetching '{url}'. Resets at {reset_str}. "
                "Configure an access token to increase the limit."
            )
        raise AccessDeniedError(f"Access denied fetching '{url}'. The repository may be private.")

    if resp.status_code == 401:
        raise AccessDeniedError(f"Authentication failed fetching '{url}' (HTTP 401).")

    if resp.status_code == 429:
        raise RateLimitError(f"API rate limit exceeded fetching '{url}' (HTTP 429).")

    raise TransportError(f"'{url}' returned HTTP {resp.status_code}")
