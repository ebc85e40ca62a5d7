"""Artifact, event and v8 API models.

These models are the typed boundaries between the object store adapter,
the artifact service and the HTTP router.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import Field

from cachegate.enums import CacheEventType, CachingStatus, EventSource
from cachegate.models.base import JsonModel

# S3 user-metadata keys (returned lower-cased by S3).
DURATION_METADATA_KEY = "duration"
TAG_METADATA_KEY = "tag"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_duration(raw: Any) -> int:
    """Parse the leading integer of a duration in milliseconds, or 0.

    Trailing text is ignored, so "12.7" and "12ms" both parse as 12.
    """
    match = _LEADING_INT.match("" if raw is None else str(raw))
    return int(match.group(1)) if match else 0


class ArtifactMetadata(JsonModel):
    """Metadata stored alongside an artifact's bytes."""

    duration_ms: int = 0
    tag: str | None = None

    def to_s3_metadata(self) -> dict[str, str]:
        metadata = {DURATION_METADATA_KEY: str(self.duration_ms)}
        if self.tag:
            metadata[TAG_METADATA_KEY] = self.tag
        return metadata

    @classmethod
    def from_s3_metadata(cls, metadata: dict[str, str] | None) -> ArtifactMetadata:
        metadata = {str(k).lower(): v for k, v in (metadata or {}).items()}
        return cls(
            duration_ms=parse_duration(metadata.get(DURATION_METADATA_KEY, "0")),
            tag=metadata.get(TAG_METADATA_KEY) or None,
        )


class ArtifactHead(JsonModel):
    """Size and metadata of a stored artifact, without its bytes."""

    content_length: int
    metadata: ArtifactMetadata = Field(default_factory=ArtifactMetadata)


class StoredArtifact(ArtifactHead):
    """A stored artifact including its bytes."""

    body: bytes


class ArtifactEvent(JsonModel):
    """Cache usage event reported by the build tool."""

    session_id: str
    source: EventSource
    hash: str
    event: CacheEventType
    duration: float | None = None


class ArtifactQueryRequest(JsonModel):
    hashes: list[str]


class ArtifactQueryHit(JsonModel):
    """Query entry for an artifact that exists."""

    size: int
    task_duration_ms: int = 0
    tag: str | None = None


class ArtifactError(JsonModel):
    message: str


class ArtifactQueryMiss(JsonModel):
    """Query entry for an artifact that could not be found."""

    error: ArtifactError

    @classmethod
    def not_found(cls) -> ArtifactQueryMiss:
        return cls(error=ArtifactError(message="Artifact not found"))


ArtifactQueryResult = ArtifactQueryHit | ArtifactQueryMiss


class ArtifactUploadResponse(JsonModel):
    urls: list[str]


class ArtifactStatusResponse(JsonModel):
    status: CachingStatus = CachingStatus.ENABLED


class EventsResponse(JsonModel):
    success: bool = True
