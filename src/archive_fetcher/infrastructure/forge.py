"""Behaviour shared by the forge REST adapters."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from archive_fetcher.domain.entities import Input
from archive_fetcher.domain.exceptions import (
    BadAddressError,
    MissingAttributeError,
    ResolutionError,
)
from archive_fetcher.domain.value_objects import DownloadRequest, Revision
from archive_fetcher.infrastructure.http import api_get

logger = logging.getLogger(__name__)


class ForgeAdapter:
    """Token handling and JSON plumbing for a hosted git forge.

    Subclasses set :attr:`type` and :attr:`default_host` and implement the
    URL builders plus :meth:`access_header_from_token` and
    :meth:`_rev_from_json`.
    """

    type: str
    default_host: str

    def __init__(self, client: httpx.Client, token: str | None = None) -> None:
        self._client = client
        self._token = token or None

    # ── Provider-specific pieces ────────────────────────────────────────

    def access_header_from_token(self, token: str) -> tuple[str, str]:
        raise NotImplementedError

    def _resolve_url(self, host: str, owner: str, repo: str, ref: str) -> str:
        raise NotImplementedError

    def _tarball_url(self, host: str, owner: str, repo: str, rev: Revision) -> str:
        raise NotImplementedError

    def _rev_from_json(self, payload: Any) -> str:
        """Pull the commit hash out of the resolve response; KeyError/IndexError/TypeError on bad shape."""
        raise NotImplementedError

    # ── ProviderAdapter ─────────────────────────────────────────────────

    def host_for(self, input: Input) -> str:
        return input.host or self.default_host

    def get_rev_from_ref(self, input: Input) -> Revision:
        """GET the provider's commit endpoint for ``input.ref`` → Revision."""
        ref = input.ref
        if ref is None:
            raise MissingAttributeError("ref")
        url = self._resolve_url(self.host_for(input), input.owner, input.repo, ref)

        resp = api_get(self._client, url, headers=self._auth_headers())
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ResolutionError(f"response from '{url}' is not valid JSON: {exc}") from exc
        try:
            raw_rev = self._rev_from_json(payload)
        except (KeyError, IndexError, TypeError) as exc:
            raise ResolutionError(
                f"response from '{url}' does not contain a commit hash"
            ) from exc
        if not isinstance(raw_rev, str):
            raise ResolutionError(f"response from '{url}' has commit hash {raw_rev!r}")
        try:
            rev = Revision.parse(raw_rev)
        except BadAddressError as exc:
            raise ResolutionError(
                f"response from '{url}' has invalid commit hash '{raw_rev}'"
            ) from exc

        logger.debug("HEAD revision for '%s' is %s", url, rev.git_rev)
        return rev

    def get_download_url(self, input: Input) -> DownloadRequest:
        """Tarball URL for the pinned revision; never built from a ref."""
        rev = input.rev
        if rev is None:
            raise MissingAttributeError("rev")
        url = self._tarball_url(self.host_for(input), input.owner, input.repo, rev)
        if self._token:
            return DownloadRequest(url, self.access_header_from_token(self._token))
        return DownloadRequest(url)

    def build_clone_address(self, input: Input) -> str:
        return f"ssh://git@{self.host_for(input)}/{input.owner}/{input.repo}.git"

    def _auth_headers(self) -> dict[str, str]:
        if not self._token:
            return {}
        name, value = self.access_header_from_token(self._token)
        return {name: value}
