"""HTTP routers package."""

from .artifact_router import create_artifact_router
from .errors import error_body, register_error_handlers

__all__ = [
    "create_artifact_router",
    "error_body",
    "register_error_handlers",
]
