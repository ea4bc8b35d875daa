"""``git+<transport>://`` scheme used for the native clone fallback.

Only parsing, overrides and cloning are supported; trees are fetched as
archives by the forge schemes instead.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Mapping
from pathlib import Path
from urllib.parse import urlencode, urlsplit, urlunsplit

from archive_fetcher.domain.attrs import AttrValue, get_str_attr
from archive_fetcher.domain.entities import Input, Tree
from archive_fetcher.domain.exceptions import (
    BadAddressError,
    CloneError,
    UnsupportedAttributeError,
)
from archive_fetcher.domain.value_objects import ParsedUrl, Revision, is_valid_ref

logger = logging.getLogger(__name__)

_TRANSPORTS = frozenset({"ssh", "https", "http", "file"})
_ALLOWED_ATTRS = frozenset({"type", "url", "ref", "rev"})


class GitScheme:
    """InputScheme for plain git repositories addressed by transport URL."""

    type = "git"

    def input_from_url(self, url: ParsedUrl) -> Input | None:
        prefix, _, transport = url.scheme.partition("+")
        if prefix != "git" or transport not in _TRANSPORTS:
            return None

        parts = urlsplit(url.raw)
        repo_url = urlunsplit((transport, parts.netloc, parts.path, "", ""))
        attrs: dict[str, AttrValue] = {"type": self.type, "url": repo_url}
        for name, value in url.query:
            if name == "ref":
                if not is_valid_ref(value):
                    raise BadAddressError(f"URL '{url}' contains an invalid branch/tag name")
                attrs["ref"] = value
            elif name == "rev":
                attrs["rev"] = Revision.parse(value).git_rev
            else:
                raise BadAddressError(f"URL '{url}' has unsupported parameter '{name}'")
        return Input.from_mapping(attrs)

    def input_from_attrs(self, attrs: Mapping[str, AttrValue]) -> Input | None:
        if attrs.get("type") != self.type:
            return None
        for name in attrs:
            if name not in _ALLOWED_ATTRS:
                raise UnsupportedAttributeError(name)
        get_str_attr(attrs, "url")
        return Input.from_mapping(dict(attrs))

    def to_url(self, input: Input) -> str:
        url = "git+" + get_str_attr(input.attrs, "url")
        query = {name: input.attrs[name] for name in ("ref", "rev") if name in input.attrs}
        if query:
            url += "?" + urlencode(query)
        return url

    def has_all_info(self, input: Input) -> bool:
        return input.rev is not None

    def apply_overrides(
        self, input: Input, ref: str | None = None, rev: Revision | None = None
    ) -> Input:
        # A clone can follow a branch and still be pinned to a commit on it
        if ref is not None:
            if not is_valid_ref(ref):
                raise BadAddressError(f"invalid branch/tag name '{ref}'")
            input = input.with_attrs(ref=ref)
        if rev is not None:
            input = input.with_attrs(rev=rev.git_rev)
        return input

    def fetch(self, input: Input) -> tuple[Tree, Input]:
        raise BadAddressError(
            f"input '{self.to_url(input)}' can only be cloned, not fetched as an archive"
        )

    def clone(self, input: Input, dest_dir: Path) -> None:
        """``git clone`` the repository into *dest_dir* and check out the pinned commit."""
        repo_url = get_str_attr(input.attrs, "url")
        argv = ["clone", "--quiet"]
        ref = input.ref
        if ref and ref != "HEAD":
            argv += ["--branch", ref]
        _run_git([*argv, repo_url, str(dest_dir)])

        rev = input.rev
        if rev is not None:
            _run_git(["checkout", "--quiet", rev.git_rev], cwd=dest_dir)
        logger.info("Cloned %s into %s", repo_url, dest_dir)


def _run_git(argv: list[str], cwd: Path | None = None) -> str:
    command = ["git", *argv]
    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            check=False,
            text=True,
            capture_output=True,
        )
    except OSError as exc:
        raise CloneError(f"cannot run '{' '.join(command)}': {exc}") from exc
    if completed.returncode != 0:
        raise CloneError(
            f"'{' '.join(command)}' failed with exit code {completed.returncode}: "
            f"{completed.stderr.strip()}"
        )
    return completed.stdout.strip()
