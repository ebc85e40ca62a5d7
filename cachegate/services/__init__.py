"""Business logic services package."""

from .artifact_service import (
    ArtifactService,
    InvalidArtifactRequestError,
    parse_content_length,
    validate_events,
)

__all__ = [
    "ArtifactService",
    "InvalidArtifactRequestError",
    "parse_content_length",
    "validate_events",
]
