"""Scheme registry — routes addresses and attribute bags to their scheme.

Built once at process start and passed to whoever resolves addresses; there
is no module-level registry.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from archive_fetcher.domain.attrs import AttrValue
from archive_fetcher.domain.entities import Input, Tree
from archive_fetcher.domain.exceptions import BadAddressError
from archive_fetcher.domain.ports.input_scheme import InputScheme
from archive_fetcher.domain.value_objects import ParsedUrl, Revision

logger = logging.getLogger(__name__)


class InputSchemeRegistry:
    """Ordered collection of the addressing schemes available to this process."""

    def __init__(self, schemes: list[InputScheme] | None = None) -> None:
        self._schemes: dict[str, InputScheme] = {}
        for scheme in schemes or []:
            self.register(scheme)

    def register(self, scheme: InputScheme) -> None:
        if scheme.type in self._schemes:
            raise ValueError(f"input scheme '{scheme.type}' is already registered")
        self._schemes[scheme.type] = scheme
        logger.debug("Registered input scheme '%s'", scheme.type)

    @property
    def scheme_types(self) -> list[str]:
        return list(self._schemes)

    def scheme_for(self, input: Input) -> InputScheme:
        scheme = self._schemes.get(input.type)
        if scheme is None:
            raise BadAddressError(f"input type '{input.type}' is not supported")
        return scheme

    # ── Construction ────────────────────────────────────────────────────

    def input_from_url(self, url: str | ParsedUrl) -> Input:
        parsed = url if isinstance(url, ParsedUrl) else ParsedUrl.from_string(url)
        for scheme in self._schemes.values():
            input = scheme.input_from_url(parsed)
            if input is not None:
                return input
        raise BadAddressError(f"input '{parsed}' is unsupported")

    def input_from_attrs(self, attrs: Mapping[str, AttrValue]) -> Input:
        for scheme in self._schemes.values():
            input = scheme.input_from_attrs(attrs)
            if input is not None:
                return input
        raise BadAddressError(f"input '{dict(attrs)}' is unsupported")

    # ── Dispatch ────────────────────────────────────────────────────────

    def to_url(self, input: Input) -> str:
        return self.scheme_for(input).to_url(input)

    def has_all_info(self, input: Input) -> bool:
        return self.scheme_for(input).has_all_info(input)

    def apply_overrides(
        self, input: Input, ref: str | None = None, rev: Revision | None = None
    ) -> Input:
        return self.scheme_for(input).apply_overrides(input, ref=ref, rev=rev)

    def fetch(self, input: Input) -> tuple[Tree, Input]:
        return self.scheme_for(input).fetch(input)

    def clone(self, input: Input, dest_dir: Path) -> None:
        self.scheme_for(input).clone(input, dest_dir)
