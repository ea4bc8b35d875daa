"""Exception handlers translating domain errors into the JSON error envelope.

The status of a domain error is that of the nearest class in its MRO found
in ``_EXCEPTION_STATUS``, so provider-specific subclasses keep their own code.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from archive_fetcher.domain.exceptions import (
    AccessDeniedError,
    ArchiveFetcherError,
    BadAddressError,
    CloneError,
    IntegrityError,
    MissingAttributeError,
    RateLimitError,
    RepositoryNotFoundError,
    ResolutionError,
    StoreError,
    TransportError,
    UnsupportedAttributeError,
)
from archive_fetcher.interface.schemas import ErrorResponse

logger = logging.getLogger(__name__)

_EXCEPTION_STATUS: dict[type[ArchiveFetcherError], int] = {
    BadAddressError: 422,
    UnsupportedAttributeError: 422,
    MissingAttributeError: 422,
    RepositoryNotFoundError: 404,
    AccessDeniedError: 403,
    RateLimitError: 429,
    ResolutionError: 502,
    TransportError: 502,
    IntegrityError: 409,
    StoreError: 500,
    CloneError: 500,
}


def status_for(exc: ArchiveFetcherError) -> int:
    """HTTP status of the most specific mapped class in *exc*'s MRO."""
    for cls in type(exc).__mro__:
        if cls in _EXCEPTION_STATUS:
            return _EXCEPTION_STATUS[cls]
    return 500


def _error_json(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application."""

    @app.exception_handler(ArchiveFetcherError)
    async def domain_handler(request: Request, exc: ArchiveFetcherError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        else:
            logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        return _error_json(status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = [
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
            for err in exc.errors()
        ]
        return _error_json(422, "; ".join(messages))

    @app.exception_handler(Exception)
    async def unexpected_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return _error_json(500, "internal error while fetching the input")
