"""GitLab REST API (v4) adapter — implements the ProviderAdapter port."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from archive_fetcher.domain.value_objects import Revision
from archive_fetcher.infrastructure.forge import ForgeAdapter


class GitLabAdapter(ForgeAdapter):
    """Concrete ProviderAdapter backed by the GitLab v4 REST API.

    Projects are addressed by their URL-encoded ``owner/repo`` path.  The
    archive endpoint is rate limited (usually 10 requests/s per address),
    more generously for authenticated callers.
    """

    type = "gitlab"
    default_host = "gitlab.com"

    def access_header_from_token(self, token: str) -> tuple[str, str]:
        return ("Authorization", f"Bearer {token}")

    def _resolve_url(self, host: str, owner: str, repo: str, ref: str) -> str:
        """GET /projects/{owner}%2F{repo}/repository/commits?ref_name={ref} → [{"id": ...}]."""
        return (
            f"https://{host}/api/v4/projects/{owner}%2F{repo}"
            f"/repository/commits?ref_name={quote(ref, safe='')}"
        )

    def _tarball_url(self, host: str, owner: str, repo: str, rev: Revision) -> str:
        return (
            f"https://{host}/api/v4/projects/{owner}%2F{repo}"
            f"/repository/archive.tar.gz?sha={rev.hex}"
        )

    def _rev_from_json(self, payload: Any) -> str:
        return payload[0]["id"]
