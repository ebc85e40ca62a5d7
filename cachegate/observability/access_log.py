"""401 Unauthorized access logging.

When a request is rejected by the bearer token check, emit one redacted JSON
line with the request metadata and the condition that failed. Request bodies
are never included: uploads are arbitrary binary artifacts.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import HTTPException
from starlette.requests import Request

from cachegate.observability.redaction import sanitize

logger = logging.getLogger("cachegate.access")


def _client_ip(request: Request) -> str | None:
    # X-Forwarded-For can be a comma-separated chain. Take the left-most.
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip() or None

    if request.client:
        return request.client.host

    return None


async def log_unauthorized_request(request: Request, exc: HTTPException) -> None:
    """Log a redacted access line for a 401 response."""
    try:
        failure = getattr(request.state, "authz_failure", None)

        payload: dict[str, Any] = {
            "status_code": exc.status_code,
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query,
            "client_ip": _client_ip(request),
            "headers": sanitize(dict(request.headers)),
            "reason": sanitize(failure) if failure is not None else None,
        }

        logger.warning(
            "ACCESS_UNAUTHORIZED %s", json.dumps(payload, ensure_ascii=False, default=str)
        )
    except Exception:
        # Never break request handling due to logging.
        logger.exception("Failed to log 401 access")
