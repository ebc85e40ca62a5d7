"""Pydantic models shared by the storage, service and router layers."""

from .artifacts import (
    ArtifactError,
    ArtifactEvent,
    ArtifactHead,
    ArtifactMetadata,
    ArtifactQueryHit,
    ArtifactQueryMiss,
    ArtifactQueryRequest,
    ArtifactQueryResult,
    ArtifactStatusResponse,
    ArtifactUploadResponse,
    EventsResponse,
    StoredArtifact,
)
from .base import JsonModel

__all__ = [
    "ArtifactError",
    "ArtifactEvent",
    "ArtifactHead",
    "ArtifactMetadata",
    "ArtifactQueryHit",
    "ArtifactQueryMiss",
    "ArtifactQueryRequest",
    "ArtifactQueryResult",
    "ArtifactStatusResponse",
    "ArtifactUploadResponse",
    "EventsResponse",
    "JsonModel",
    "StoredArtifact",
]
