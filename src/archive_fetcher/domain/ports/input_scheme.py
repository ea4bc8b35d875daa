"""Port: addressing scheme — how the registry talks to every kind of input."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from archive_fetcher.domain.attrs import AttrValue
from archive_fetcher.domain.entities import Input, Tree
from archive_fetcher.domain.value_objects import ParsedUrl, Revision


class InputScheme(Protocol):
    """A named addressing scheme that can parse, render and fetch its inputs.

    ``input_from_url`` / ``input_from_attrs`` return ``None`` when the URL or
    bag belongs to a different scheme.
    """

    type: str

    def input_from_url(self, url: ParsedUrl) -> Input | None:
        ...

    def input_from_attrs(self, attrs: Mapping[str, AttrValue]) -> Input | None:
        ...

    def to_url(self, input: Input) -> str:
        ...

    def has_all_info(self, input: Input) -> bool:
        ...

    def apply_overrides(
        self, input: Input, ref: str | None = None, rev: Revision | None = None
    ) -> Input:
        ...

    def fetch(self, input: Input) -> tuple[Tree, Input]:
        ...

    def clone(self, input: Input, dest_dir: Path) -> None:
        ...
