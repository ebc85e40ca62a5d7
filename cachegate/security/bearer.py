"""Static bearer token enforcement for HTTP handlers.

A single shared token, loaded once from GatewayConfig, guards every artifact
route. There is no per-team authorization.
"""

from __future__ import annotations

import secrets

from fastapi import HTTPException, Request, status

UNAUTHORIZED_DETAIL = "Unauthorized"
_BEARER_SCHEME = "bearer"


class AuthError(HTTPException):
    """401 raised when the Authorization header does not carry the token."""

    def __init__(self, detail: str = UNAUTHORIZED_DETAIL) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from ``Bearer <token>``, or None if malformed."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != _BEARER_SCHEME or not token or " " in token:
        return None
    return token


class BearerTokenAuth:
    """FastAPI dependency rejecting requests without the configured token."""

    def __init__(self, token: str) -> None:
        if not token:
            raise ValueError("bearer token is required")
        self._token = token

    def _reject(self, request: Request, condition: str) -> None:
        # Record which condition failed so 401 logs can show why we rejected.
        request.state.authz_failure = {"code": "BEARER_DENY", "condition": condition}
        raise AuthError()

    async def __call__(self, request: Request) -> None:
        authorization = request.headers.get("authorization")
        if authorization is None:
            self._reject(request, "missing_header")

        token = extract_bearer_token(authorization)
        if token is None:
            self._reject(request, "malformed_header")

        if not secrets.compare_digest(token.encode("utf-8"), self._token.encode("utf-8")):
            self._reject(request, "token_mismatch")
