"""Pydantic request / response DTOs for the API boundary."""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, model_validator

AttrValue = Union[bool, int, str]


class ParseRequest(BaseModel):
    """Request body for ``POST /inputs/parse``."""

    url: str


class ParseResponse(BaseModel):
    """An address decoded into its attributes."""

    attrs: dict[str, AttrValue]
    url: str
    has_all_info: bool


class FetchRequest(BaseModel):
    """Request body for ``POST /fetch``: either an address or an attribute bag."""

    url: str | None = None
    attrs: dict[str, AttrValue] | None = None

    @model_validator(mode="after")
    def _exactly_one_source(self) -> FetchRequest:
        if (self.url is None) == (self.attrs is None):
            msg = "Provide exactly one of 'url' or 'attrs'."
            raise ValueError(msg)
        return self


class FetchResponse(BaseModel):
    """Successful response from ``POST /fetch``."""

    path: str
    store_path: str
    attrs: dict[str, AttrValue]
    url: str
    rev: str
    last_modified: int


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    message: str
