"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
"""

from __future__ import annotations


class ArchiveFetcherError(Exception):
    """Base exception for the entire application."""


# ── Addressing ──────────────────────────────────────────────────────────────


class BadAddressError(ArchiveFetcherError):
    """Malformed or self-contradictory address text or attribute combination."""


class UnsupportedAttributeError(ArchiveFetcherError):
    """An attribute bag carries a key the scheme does not recognise."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unsupported input attribute '{name}'")
        self.name = name


class MissingAttributeError(ArchiveFetcherError):
    """A required attribute is absent from an attribute bag."""

    def __init__(self, name: str) -> None:
        super().__init__(f"attribute '{name}' missing")
        self.name = name


# ── Resolution ──────────────────────────────────────────────────────────────


class ResolutionError(ArchiveFetcherError):
    """The provider answered, but its answer did not contain a usable revision."""


class IntegrityError(ArchiveFetcherError):
    """A fetched tree does not match the content hash pinned in the input."""


# ── Transport errors ────────────────────────────────────────────────────────


class TransportError(ArchiveFetcherError):
    """Network failure or unexpected HTTP status from a provider."""


class RepositoryNotFoundError(TransportError):
    """The repository, branch or revision does not exist (404)."""


class AccessDeniedError(TransportError):
    """The provider refused the request (401 / 403)."""


class RateLimitError(TransportError):
    """Provider API rate limit exceeded (429 / 403 with rate-limit header)."""


# ── Local collaborators ─────────────────────────────────────────────────────


class StoreError(ArchiveFetcherError):
    """Failed to unpack, store or read back a tree or cache entry."""


class CloneError(ArchiveFetcherError):
    """The fallback ``git clone`` failed."""
