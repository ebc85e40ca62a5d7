"""Request authentication and team scoping."""

from .bearer import AuthError, BearerTokenAuth, extract_bearer_token
from .team import resolve_team

__all__ = ["AuthError", "BearerTokenAuth", "extract_bearer_token", "resolve_team"]
