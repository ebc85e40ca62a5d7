"""S3-backed object store for build artifacts.

Keeps all AWS/S3 logic out of the service and router layers. Every boto3
call is a single blocking request, so each one is pushed to a worker thread.
There is no retry, caching or batching here; callers decide what a failure
means.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from botocore.exceptions import BotoCoreError, ClientError

from cachegate.models.artifacts import ArtifactHead, ArtifactMetadata, StoredArtifact

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

ARTIFACT_KEY_PREFIX = "artifacts"

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class ArtifactNotFoundError(Exception):
    """Raised when no object exists at the requested key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"No artifact stored at {key}")
        self.key = key


class StorageError(Exception):
    """Raised when the object store call fails for any other reason."""

    def __init__(self, key: str, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.key = key
        self.code = code


def artifact_key(team: str, artifact_hash: str) -> str:
    """Team-scoped storage key for an artifact."""
    return f"{ARTIFACT_KEY_PREFIX}/{team}/{artifact_hash}"


def _translate_error(key: str, exc: Exception, *, not_found: bool = True) -> Exception:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {}) or {}
        code = str(error.get("Code", ""))
        if not_found and code in _NOT_FOUND_CODES:
            return ArtifactNotFoundError(key)
        return StorageError(key, code or "ClientError", str(error.get("Message") or exc))
    return StorageError(key, type(exc).__name__, str(exc))


class ObjectStore:
    """Put/Get/Head of artifact blobs with metadata in a single bucket."""

    def __init__(self, s3_client: "S3Client", bucket: str) -> None:
        """Initialize the store.

        Args:
            s3_client: Boto3 S3 client (configured for MinIO/LocalStack in dev).
            bucket: Bucket holding every team's artifacts.
        """
        self._s3 = s3_client
        self.bucket = bucket

    async def put(
        self,
        key: str,
        body: bytes,
        content_length: int,
        metadata: ArtifactMetadata,
    ) -> None:
        """Store bytes and metadata at key, replacing any previous object.

        The declared content length is passed through as-is.

        Raises:
            StorageError: If the upload fails.
        """
        try:
            await asyncio.to_thread(
                self._s3.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentLength=content_length,
                Metadata=metadata.to_s3_metadata(),
            )
        except (ClientError, BotoCoreError) as e:
            raise _translate_error(key, e, not_found=False) from e

        logger.debug("Stored object (bucket=%s key=%s bytes=%s)", self.bucket, key, content_length)

    async def get(self, key: str) -> StoredArtifact:
        """Fetch an object's bytes and metadata.

        Raises:
            ArtifactNotFoundError: If nothing is stored at key.
            StorageError: For any other failure.
        """
        try:
            response = await asyncio.to_thread(self._s3.get_object, Bucket=self.bucket, Key=key)
            body = response["Body"]
            try:
                data = await asyncio.to_thread(body.read)
            finally:
                body.close()
        except (ClientError, BotoCoreError) as e:
            raise _translate_error(key, e) from e

        return StoredArtifact(
            body=data,
            content_length=int(response.get("ContentLength", len(data))),
            metadata=ArtifactMetadata.from_s3_metadata(response.get("Metadata")),
        )

    async def head(self, key: str) -> ArtifactHead:
        """Fetch an object's size and metadata without its bytes.

        Raises:
            ArtifactNotFoundError: If nothing is stored at key.
            StorageError: For any other failure.
        """
        try:
            response = await asyncio.to_thread(self._s3.head_object, Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise _translate_error(key, e) from e

        return ArtifactHead(
            content_length=int(response.get("ContentLength", 0)),
            metadata=ArtifactMetadata.from_s3_metadata(response.get("Metadata")),
        )
