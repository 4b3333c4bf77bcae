"""Translate domain errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from linkhub.errors import ErrorKind, ResourceError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DUPLICATE_SLUG: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.IMMUTABLE: status.HTTP_409_CONFLICT,
}

GENERIC_ERROR_DETAIL = "Internal server error"


def status_for(kind: ErrorKind) -> int:
    return STATUS_BY_KIND.get(kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def resource_error_handler(request: Request, exc: ResourceError) -> JSONResponse:
    status_code = status_for(exc.kind)
    if status_code >= 500:
        logger.error(
            "%s %s failed (%s)", request.method, request.url.path, exc.kind.value, exc_info=exc
        )
        return JSONResponse(status_code=status_code, content={"detail": GENERIC_ERROR_DETAIL})
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ResourceError, resource_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
