"""Error rendering for the v8 artifacts API.

Every HTTP error leaves the gateway as ``{"error": {"message": ...}}``; HEAD
responses carry no body at all.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from cachegate.observability.access_log import log_unauthorized_request

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = "Internal server error"


def error_body(message: str) -> dict:
    return {"error": {"message": message}}


def error_response(
    request: Request,
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
) -> Response:
    if request.method == "HEAD":
        return Response(status_code=status_code, headers=headers)
    return JSONResponse(error_body(message), status_code=status_code, headers=headers)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        await log_unauthorized_request(request, exc)
    return error_response(request, exc.status_code, str(exc.detail), exc.headers)


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> Response:
    logger.debug("Rejected request %s %s: %s", request.method, request.url.path, exc.errors())
    return error_response(request, status.HTTP_400_BAD_REQUEST, "Invalid request")


async def _unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_DETAIL)


def register_error_handlers(app: FastAPI) -> None:
    """Install the gateway's error handlers on an app."""
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
