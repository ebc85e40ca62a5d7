"""Object storage package."""

from .object_store import (
    ArtifactNotFoundError,
    ObjectStore,
    StorageError,
    artifact_key,
)

__all__ = ["ArtifactNotFoundError", "ObjectStore", "StorageError", "artifact_key"]
