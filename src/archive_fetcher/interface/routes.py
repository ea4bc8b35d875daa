"""API routes — thin controllers that delegate to the scheme registry."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from archive_fetcher.interface.dependencies import get_registry
from archive_fetcher.interface.schemas import (
    ErrorResponse,
    FetchRequest,
    FetchResponse,
    ParseRequest,
    ParseResponse,
)
from archive_fetcher.services.registry import InputSchemeRegistry

router = APIRouter()


@router.post(
    "/inputs/parse",
    response_model=ParseResponse,
    responses={422: {"model": ErrorResponse, "description": "Malformed or contradictory address"}},
)
def parse_input(
    body: ParseRequest,
    registry: InputSchemeRegistry = Depends(get_registry),
) -> ParseResponse:
    """Decode an address without touching the network."""
    input = registry.input_from_url(body.url)
    return ParseResponse(
        attrs=input.attrs.to_dict(),
        url=registry.to_url(input),
        has_all_info=registry.has_all_info(input),
    )


@router.post(
    "/fetch",
    response_model=FetchResponse,
    responses={
        422: {"model": ErrorResponse, "description": "Malformed address or unsupported attribute"},
        403: {"model": ErrorResponse, "description": "Repository is private"},
        404: {"model": ErrorResponse, "description": "Repository, branch or commit not found"},
        409: {"model": ErrorResponse, "description": "Tree does not match the pinned narHash"},
        429: {"model": ErrorResponse, "description": "Provider API rate limit exceeded"},
        502: {"model": ErrorResponse, "description": "Provider returned an unusable answer"},
    },
)
def fetch(
    body: FetchRequest,
    registry: InputSchemeRegistry = Depends(get_registry),
) -> FetchResponse:
    """Resolve an address to a commit and return its unpacked tree."""
    if body.url is not None:
        input = registry.input_from_url(body.url)
    else:
        input = registry.input_from_attrs(body.attrs or {})

    tree, resolved = registry.fetch(input)
    return FetchResponse(
        path=str(tree.actual_path),
        store_path=str(tree.store_path),
        attrs=resolved.attrs.to_dict(),
        url=registry.to_url(resolved),
        rev=resolved.attrs["rev"],
        last_modified=resolved.attrs["lastModified"],
    )
