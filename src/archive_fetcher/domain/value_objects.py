"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from urllib.parse import parse_qsl, urlsplit

from archive_fetcher.domain.exceptions import BadAddressError

REV_RE = re.compile(r"[0-9a-fA-F]{40}")
REF_RE = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9_.\-/]*")
HOST_RE = re.compile(r"[a-zA-Z0-9.\-]+")

# Names git itself refuses (see git-check-ref-format)
_BAD_REF_RE = re.compile(r"\.\.|//|@\{|\.lock$|/$|\.$")

_SHA1_SIZE = 20


def is_valid_ref(name: str) -> bool:
    """True if *name* is usable as a branch or tag name."""
    return bool(REF_RE.fullmatch(name)) and not _BAD_REF_RE.search(name)


def is_valid_host(host: str) -> bool:
    return bool(HOST_RE.fullmatch(host))


@dataclass(frozen=True, slots=True)
class Revision:
    """A git commit identifier (SHA-1), compared by its raw digest bytes.

    Accepts ``<40 hex>``, ``sha1:<40 hex>`` and the SRI form
    ``sha1-<base64>``.
    """

    digest: bytes

    def __post_init__(self) -> None:
        if len(self.digest) != _SHA1_SIZE:
            raise BadAddressError(
                f"revision digest must be {_SHA1_SIZE} bytes, got {len(self.digest)}"
            )

    @classmethod
    def parse(cls, text: str) -> Revision:
        """Parse a commit hash in any of the supported encodings."""
        raw = text.strip()
        if raw.startswith("sha1:"):
            raw = raw[len("sha1:"):]
        elif raw.startswith("sha1-"):
            try:
                return cls(base64.b64decode(raw[len("sha1-"):], validate=True))
            except (binascii.Error, BadAddressError) as exc:
                raise BadAddressError(f"invalid SHA-1 hash '{text}'") from exc
        if not REV_RE.fullmatch(raw):
            raise BadAddressError(f"invalid SHA-1 hash '{text}'")
        return cls(bytes.fromhex(raw))

    @property
    def hex(self) -> str:
        """Lowercase base-16 rendering, no prefix."""
        return self.digest.hex()

    @property
    def git_rev(self) -> str:
        """The form git uses on the command line and in URLs."""
        return self.digest.hex()

    @property
    def sri(self) -> str:
        return "sha1-" + base64.b64encode(self.digest).decode("ascii")

    def __str__(self) -> str:
        return self.git_rev


@dataclass(frozen=True, slots=True)
class ParsedUrl:
    """A ``<scheme>:<path>[?query]`` address split into its parts.

    ``query`` keeps every parameter in order, repeated names included, so
    duplicates can be detected by the scheme that interprets them.
    """

    scheme: str
    authority: str
    path: str
    query: tuple[tuple[str, str], ...] = ()
    raw: str = ""

    @classmethod
    def from_string(cls, url: str) -> ParsedUrl:
        """Split a raw URL string; rejects text without a scheme."""
        url = url.strip()
        parts = urlsplit(url)
        if not parts.scheme:
            raise BadAddressError(f"'{url}' is not a URL")
        return cls(
            scheme=parts.scheme,
            authority=parts.netloc,
            path=parts.path,
            query=tuple(parse_qsl(parts.query, keep_blank_values=True)),
            raw=url,
        )

    @property
    def path_segments(self) -> list[str]:
        return [segment for segment in self.path.split("/") if segment]

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True, slots=True)
class DownloadRequest:
    """A URL to download plus the optional authorization header to send with it."""

    url: str
    access_token_header: tuple[str, str] | None = field(default=None, repr=False)

    @property
    def headers(self) -> dict[str, str]:
        if self.access_token_header is None:
            return {}
        name, value = self.access_token_header
        return {name: value}
