"""Port: provider adapter — one implementation per hosting provider."""

from __future__ import annotations

from typing import Protocol

from archive_fetcher.domain.entities import Input
from archive_fetcher.domain.value_objects import DownloadRequest, Revision


class ProviderAdapter(Protocol):
    """What a forge must answer so its repositories can be fetched as archives."""

    type: str
    default_host: str

    def access_header_from_token(self, token: str) -> tuple[str, str]:
        """Format *token* as the ``(header name, header value)`` the API expects."""
        ...

    def get_rev_from_ref(self, input: Input) -> Revision:
        """Ask the provider which commit ``input.ref`` currently points to."""
        ...

    def get_download_url(self, input: Input) -> DownloadRequest:
        """Return the tarball URL for ``input.rev`` with its auth header."""
        ...

    def build_clone_address(self, input: Input) -> str:
        """Return the ``ssh://`` address for a native clone of the repository."""
        ...
