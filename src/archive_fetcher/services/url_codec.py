"""Address codec for forge archive inputs.

Maps between ``<type>:<owner>/<repo>[/<ref-or-rev>][?ref=&rev=&host=]`` text
and :class:`Input` attribute bags, and enforces the rule that an input names
either a branch/tag (``ref``) or a commit (``rev``), never both.
"""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urlencode

from archive_fetcher.domain.attrs import AttrValue, get_str_attr
from archive_fetcher.domain.entities import Input
from archive_fetcher.domain.exceptions import (
    BadAddressError,
    UnsupportedAttributeError,
)
from archive_fetcher.domain.value_objects import (
    REV_RE,
    ParsedUrl,
    Revision,
    is_valid_host,
    is_valid_ref,
)

ALLOWED_ATTRS = frozenset(
    {"type", "owner", "repo", "ref", "rev", "narHash", "lastModified", "host"}
)


def input_from_url(scheme_type: str, url: ParsedUrl) -> Input | None:
    """Parse *url* into an Input, or return ``None`` if it is another scheme's."""
    if url.scheme != scheme_type:
        return None

    path = url.path_segments
    rev: Revision | None = None
    ref: str | None = None
    host: str | None = None

    if len(path) == 3:
        if REV_RE.fullmatch(path[2]):
            rev = Revision.parse(path[2])
        elif is_valid_ref(path[2]):
            ref = path[2]
        else:
            raise BadAddressError(
                f"in URL '{url}', '{path[2]}' is not a commit hash or branch/tag name"
            )
    elif len(path) != 2:
        raise BadAddressError(f"URL '{url}' is invalid")

    for name, value in url.query:
        if name == "rev":
            if rev is not None:
                raise BadAddressError(f"URL '{url}' contains multiple commit hashes")
            rev = Revision.parse(value)
        elif name == "ref":
            if not is_valid_ref(value):
                raise BadAddressError(f"URL '{url}' contains an invalid branch/tag name")
            if ref is not None:
                raise BadAddressError(f"URL '{url}' contains multiple branch/tag names")
            ref = value
        elif name == "host":
            if not is_valid_host(value):
                raise BadAddressError(f"URL '{url}' contains an invalid instance host")
            if host is not None:
                raise BadAddressError(f"URL '{url}' contains multiple instance hosts")
            host = value
        else:
            raise BadAddressError(f"URL '{url}' has unsupported parameter '{name}'")

    if ref is not None and rev is not None:
        raise BadAddressError(
            f"URL '{url}' contains both a commit hash and a branch/tag name "
            f"{ref} {rev.git_rev}"
        )

    attrs: dict[str, AttrValue] = {"type": scheme_type, "owner": path[0], "repo": path[1]}
    if rev is not None:
        attrs["rev"] = rev.git_rev
    if ref is not None:
        attrs["ref"] = ref
    if host is not None:
        attrs["host"] = host
    return Input.from_mapping(attrs)


def input_from_attrs(scheme_type: str, attrs: Mapping[str, AttrValue]) -> Input | None:
    """Validate a raw attribute bag; ``None`` if its ``type`` is another scheme's."""
    if attrs.get("type") != scheme_type:
        return None

    for name in attrs:
        if name not in ALLOWED_ATTRS:
            raise UnsupportedAttributeError(name)

    get_str_attr(attrs, "owner")
    get_str_attr(attrs, "repo")
    if "ref" in attrs and "rev" in attrs:
        raise BadAddressError(
            f"input attributes contain both a commit hash and a branch/tag name "
            f"{attrs['ref']} {attrs['rev']}"
        )

    return Input.from_mapping(dict(attrs))


def render_url(input: Input) -> str:
    """Render *input* back to its canonical address text."""
    ref = input.ref
    rev = input.rev
    assert not (ref and rev), f"input {input.attrs!r} has both ref and rev"

    path = f"{input.owner}/{input.repo}"
    query: dict[str, str] = {}
    if ref and "/" in ref:
        # A multi-segment ref would read back as extra path segments
        query["ref"] = ref
    elif ref:
        path += f"/{ref}"
    if rev:
        path += f"/{rev.hex}"
    if input.host:
        query["host"] = input.host
    url = f"{input.type}:{path}"
    if query:
        url += "?" + urlencode(query, safe="/")
    return url


def has_all_info(input: Input) -> bool:
    """True once the input is pinned to a commit and carries its timestamp."""
    return input.rev is not None and input.last_modified is not None


def apply_overrides(
    input: Input,
    ref: str | None = None,
    rev: Revision | None = None,
) -> Input:
    """Return a copy of *input* pointing at *ref* or *rev* instead."""
    if ref is not None and rev is not None:
        raise BadAddressError(
            f"cannot apply both a commit hash ({rev.git_rev}) and a branch/tag name "
            f"('{ref}') to input '{render_url(input)}'"
        )
    if rev is not None:
        input = input.with_attrs(rev=rev.git_rev, ref=None)
    if ref is not None:
        if not is_valid_ref(ref):
            raise BadAddressError(f"invalid branch/tag name '{ref}'")
        input = input.with_attrs(ref=ref, rev=None)
    return input
