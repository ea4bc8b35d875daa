"""GitHub REST API adapter — implements the ProviderAdapter port."""

from __future__ import annotations

from typing import Any

from archive_fetcher.domain.value_objects import Revision
from archive_fetcher.infrastructure.forge import ForgeAdapter


class GitHubAdapter(ForgeAdapter):
    """Concrete ProviderAdapter backed by the GitHub v3 REST API.

    Self-hosted GitHub Enterprise instances are addressed with ``host``; the
    API lives on ``api.<host>``.
    """

    type = "github"
    default_host = "github.com"

    def access_header_from_token(self, token: str) -> tuple[str, str]:
        return ("Authorization", f"token {token}")

    def _resolve_url(self, host: str, owner: str, repo: str, ref: str) -> str:
        """GET /repos/{owner}/{repo}/commits/{ref} → {"sha": ...}."""
        return f"https://api.{host}/repos/{owner}/{repo}/commits/{ref}"

    def _tarball_url(self, host: str, owner: str, repo: str, rev: Revision) -> str:
        return f"https://api.{host}/repos/{owner}/{repo}/tarball/{rev.hex}"

    def _rev_from_json(self, payload: Any) -> str:
        return payload["sha"]
