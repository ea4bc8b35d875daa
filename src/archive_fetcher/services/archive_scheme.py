"""Forge archive scheme — one addressing scheme per provider adapter."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from archive_fetcher.domain.attrs import AttrValue
from archive_fetcher.domain.entities import Input, Tree
from archive_fetcher.domain.exceptions import BadAddressError
from archive_fetcher.domain.ports.input_scheme import InputScheme
from archive_fetcher.domain.ports.provider import ProviderAdapter
from archive_fetcher.domain.value_objects import ParsedUrl, Revision
from archive_fetcher.services import url_codec
from archive_fetcher.services.fetch_archive import DEFAULT_REF, ArchiveFetcher

logger = logging.getLogger(__name__)


class GitArchiveScheme:
    """An :class:`InputScheme` for ``<provider>:owner/repo`` addresses.

    The codec and fetch algorithm are the same for every provider; the
    *adapter* supplies the provider-specific URLs.  *clone_scheme* handles
    the ``git+ssh`` fallback used by :meth:`clone`.
    """

    def __init__(
        self,
        adapter: ProviderAdapter,
        fetcher: ArchiveFetcher,
        clone_scheme: InputScheme | None = None,
    ) -> None:
        self._adapter = adapter
        self._fetcher = fetcher
        self._clone_scheme = clone_scheme

    @property
    def type(self) -> str:
        return self._adapter.type

    def input_from_url(self, url: ParsedUrl) -> Input | None:
        return url_codec.input_from_url(self.type, url)

    def input_from_attrs(self, attrs: Mapping[str, AttrValue]) -> Input | None:
        return url_codec.input_from_attrs(self.type, attrs)

    def to_url(self, input: Input) -> str:
        return url_codec.render_url(input)

    def has_all_info(self, input: Input) -> bool:
        return url_codec.has_all_info(input)

    def apply_overrides(
        self, input: Input, ref: str | None = None, rev: Revision | None = None
    ) -> Input:
        return url_codec.apply_overrides(input, ref=ref, rev=rev)

    def fetch(self, input: Input) -> tuple[Tree, Input]:
        return self._fetcher.fetch(input)

    def clone(self, input: Input, dest_dir: Path) -> None:
        """Clone the repository over SSH instead of downloading a tarball."""
        if self._clone_scheme is None:
            raise BadAddressError(f"input '{self.to_url(input)}' does not support cloning")
        address = "git+" + self._adapter.build_clone_address(input)
        git_input = self._clone_scheme.input_from_url(ParsedUrl.from_string(address))
        if git_input is None:
            raise BadAddressError(f"clone address '{address}' is not a git URL")
        git_input = self._clone_scheme.apply_overrides(
            git_input, ref=input.ref or DEFAULT_REF, rev=input.rev
        )
        logger.info("Cloning %s into %s", address, dest_dir)
        self._clone_scheme.clone(git_input, dest_dir)
