"""StrEnum definitions for type-safe constants."""

from enum import StrEnum


class EventSource(StrEnum):
    """Where a cache lookup was served from."""

    LOCAL = "LOCAL"
    REMOTE = "REMOTE"


class CacheEventType(StrEnum):
    """Cache usage outcome reported by the build tool."""

    HIT = "HIT"
    MISS = "MISS"


class CachingStatus(StrEnum):
    """Remote caching status values.

    Only ENABLED is ever reported; the others are part of the v8 contract.
    """

    DISABLED = "disabled"
    ENABLED = "enabled"
    OVER_LIMIT = "over_limit"
    PAUSED = "paused"


class StorageFailureCode(StrEnum):
    """Internal classification of object store failures (logging only)."""

    ARTIFACT_MISSING = "artifact_missing"
    STORAGE_UNAVAILABLE = "storage_unavailable"
