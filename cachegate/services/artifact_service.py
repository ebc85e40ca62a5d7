"""Artifact business logic service.

Implements upload, download, existence and batch query semantics on top of
the ObjectStore, plus validation of cache usage events. The team scope is
always an explicit argument; the service holds no per-request state.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, urlencode

from pydantic import ValidationError

from cachegate.enums import CacheEventType, StorageFailureCode
from cachegate.models.artifacts import (
    ArtifactEvent,
    ArtifactHead,
    ArtifactMetadata,
    ArtifactQueryHit,
    ArtifactQueryMiss,
    ArtifactQueryResult,
    StoredArtifact,
    parse_duration,
)
from cachegate.observability.error_log_file import log_storage_error
from cachegate.storage.object_store import (
    ArtifactNotFoundError,
    ObjectStore,
    StorageError,
    artifact_key,
)

logger = logging.getLogger(__name__)

INVALID_CONTENT_LENGTH = "Invalid Content-Length"
INVALID_EVENT_DATA = "Invalid event data"
DURATION_REQUIRED = "Duration is required for HIT events"

_REQUIRED_EVENT_FIELDS = ("sessionId", "source", "hash", "event")


class InvalidArtifactRequestError(ValueError):
    """Raised when a request is malformed (bad length, bad event data, ...)."""

    pass


def parse_content_length(raw: str | None) -> int:
    """Parse a declared Content-Length, which must be a positive integer.

    Raises:
        InvalidArtifactRequestError: If absent, non-numeric or <= 0.
    """
    try:
        length = int((raw or "").strip())
    except ValueError:
        raise InvalidArtifactRequestError(INVALID_CONTENT_LENGTH) from None
    if length <= 0:
        raise InvalidArtifactRequestError(INVALID_CONTENT_LENGTH)
    return length


def validate_events(raw_events: Any) -> list[ArtifactEvent]:
    """Validate a batch of cache usage events.

    Validation stops at the first invalid event; one bad entry rejects the
    whole batch.

    Raises:
        InvalidArtifactRequestError: With the message of the first failure.
    """
    if not isinstance(raw_events, list):
        raise InvalidArtifactRequestError(INVALID_EVENT_DATA)

    events: list[ArtifactEvent] = []
    for raw in raw_events:
        if not isinstance(raw, dict) or not all(raw.get(f) for f in _REQUIRED_EVENT_FIELDS):
            raise InvalidArtifactRequestError(INVALID_EVENT_DATA)
        try:
            event = ArtifactEvent.model_validate(raw)
        except ValidationError as e:
            raise InvalidArtifactRequestError(INVALID_EVENT_DATA) from e
        if event.event == CacheEventType.HIT and event.duration is None:
            raise InvalidArtifactRequestError(DURATION_REQUIRED)
        events.append(event)
    return events


class ArtifactService:
    """Artifact business logic.

    All storage access is delegated to the ObjectStore.
    """

    def __init__(self, store: ObjectStore, *, public_url: str) -> None:
        """Initialize the artifact service.

        Args:
            store: Object store adapter for artifact blobs.
            public_url: Base URL used to build download links.
        """
        self.store = store
        self.public_url = public_url.rstrip("/")

    def download_url(self, team: str, artifact_hash: str) -> str:
        """Self-referential download link for an artifact."""
        query = urlencode({"teamId": team})
        return f"{self.public_url}/v8/artifacts/{quote(artifact_hash, safe='')}?{query}"

    async def upload(
        self,
        team: str,
        artifact_hash: str,
        body: bytes,
        *,
        content_length: int,
        duration: str | None = None,
        tag: str | None = None,
    ) -> list[str]:
        """Store an artifact, overwriting any previous upload for the key.

        Args:
            team: Team scope.
            artifact_hash: Client-supplied artifact hash (not verified).
            body: Artifact bytes.
            content_length: Declared length, stored as given.
            duration: Raw ``x-artifact-duration`` header value.
            tag: Raw ``x-artifact-tag`` header value.

        Returns:
            Single-element list with the artifact's download URL.

        Raises:
            InvalidArtifactRequestError: If content_length is not positive.
            StorageError: If the store rejects the upload.
        """
        if content_length <= 0:
            raise InvalidArtifactRequestError(INVALID_CONTENT_LENGTH)

        key = artifact_key(team, artifact_hash)
        metadata = ArtifactMetadata(duration_ms=parse_duration(duration), tag=tag or None)
        try:
            await self.store.put(key, body, content_length, metadata)
        except StorageError as e:
            log_storage_error("put", StorageFailureCode.STORAGE_UNAVAILABLE, e, team=team, key=key)
            raise

        logger.info(
            "Stored artifact (team=%s hash=%s bytes=%s duration_ms=%s tag=%s)",
            team,
            artifact_hash,
            content_length,
            metadata.duration_ms,
            metadata.tag,
        )
        return [self.download_url(team, artifact_hash)]

    def _log_read_failure(self, operation: str, team: str, key: str, error: Exception) -> None:
        code = (
            StorageFailureCode.ARTIFACT_MISSING
            if isinstance(error, ArtifactNotFoundError)
            else StorageFailureCode.STORAGE_UNAVAILABLE
        )
        log_storage_error(operation, code, error, team=team, key=key)

    async def download(self, team: str, artifact_hash: str) -> StoredArtifact:
        """Fetch an artifact's bytes and metadata.

        Raises:
            ArtifactNotFoundError: If the artifact is absent or the store
                failed; both look the same to callers.
        """
        key = artifact_key(team, artifact_hash)
        try:
            return await self.store.get(key)
        except (ArtifactNotFoundError, StorageError) as e:
            self._log_read_failure("get", team, key, e)
            raise ArtifactNotFoundError(key) from e

    async def exists(self, team: str, artifact_hash: str) -> ArtifactHead:
        """Fetch an artifact's size and metadata without its bytes.

        Raises:
            ArtifactNotFoundError: If the artifact is absent or the store failed.
        """
        key = artifact_key(team, artifact_hash)
        try:
            return await self.store.head(key)
        except (ArtifactNotFoundError, StorageError) as e:
            self._log_read_failure("head", team, key, e)
            raise ArtifactNotFoundError(key) from e

    async def query(self, team: str, hashes: list[str]) -> dict[str, ArtifactQueryResult]:
        """Look up each hash independently; misses never fail the batch."""
        results: dict[str, ArtifactQueryResult] = {}
        for artifact_hash in hashes:
            try:
                head = await self.exists(team, artifact_hash)
            except ArtifactNotFoundError:
                results[artifact_hash] = ArtifactQueryMiss.not_found()
                continue
            except Exception:
                logger.warning(
                    "Unexpected error checking artifact (team=%s hash=%s)",
                    team,
                    artifact_hash,
                    exc_info=True,
                )
                results[artifact_hash] = ArtifactQueryMiss.not_found()
                continue
            results[artifact_hash] = ArtifactQueryHit(
                size=head.content_length,
                task_duration_ms=head.metadata.duration_ms,
                tag=head.metadata.tag,
            )
        return results

    async def record_events(self, team: str, raw_events: Any) -> int:
        """Validate and discard cache usage events.

        Returns:
            Number of accepted events.

        Raises:
            InvalidArtifactRequestError: If any event is invalid.
        """
        events = validate_events(raw_events)
        logger.info("Processed %d artifact events (team=%s)", len(events), team)
        return len(events)
