"""
Exception handlers mapping the store error taxonomy to HTTP responses. Errors
raised anywhere below the routes arrive here unchanged.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from structlog import get_logger

from groupcal.core.errors import (
    InvalidInputError,
    NotAllowedError,
    NotFoundError,
    UnauthenticatedError,
)

STATUS_CODES = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (NotAllowedError, status.HTTP_403_FORBIDDEN),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (UnauthenticatedError, status.HTTP_401_UNAUTHORIZED),
)


def _handler(status_code: int):
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        log = get_logger()
        await log.ainfo(
            "api.error",
            path=request.url.path,
            method=request.method,
            error=type(exc).__name__,
            status_code=status_code,
            detail=str(exc),
        )
        return JSONResponse(status_code=status_code, content={"msg": str(exc)})

    return handle


def add_exception_handlers(app: FastAPI) -> FastAPI:
    """
    Adds exception handlers for every family of store errors, so that they
    become 4xx responses rather than 500s.
    """
    for exception, status_code in STATUS_CODES:
        app.add_exception_handler(exception, _handler(status_code))

    return app
