"""Pytest configuration and fixtures."""

import pytest

from cachegate.models.artifacts import ArtifactHead, ArtifactMetadata, StoredArtifact
from cachegate.storage.object_store import ArtifactNotFoundError

# Configure pytest-asyncio to auto-detect async tests
pytest_plugins = ("pytest_asyncio",)

# Environment variables GatewayConfig reads; cleared so the host
# environment cannot leak into config tests.
GATEWAY_ENV_VARS = [
    "AWS_REGION",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "S3_BUCKET_NAME",
    "S3_ENDPOINT_URL",
    "TURBO_API_TOKEN",
    "HOST",
    "PORT",
    "PUBLIC_URL",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
    "ERROR_LOG_FILE_ENABLED",
    "ERROR_LOG_FILE_PATH",
]


class InMemoryObjectStore:
    """ObjectStore stand-in keeping objects in a dict.

    Raises the same exceptions as the S3-backed store. Set ``fail_with`` to
    make every call raise that exception instead.
    """

    def __init__(self) -> None:
        self.objects: dict[str, StoredArtifact] = {}
        self.fail_with: Exception | None = None
        self.put_calls = 0

    async def put(
        self,
        key: str,
        body: bytes,
        content_length: int,
        metadata: ArtifactMetadata,
    ) -> None:
        self.put_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        self.objects[key] = StoredArtifact(
            body=body, content_length=content_length, metadata=metadata
        )

    async def get(self, key: str) -> StoredArtifact:
        if self.fail_with is not None:
            raise self.fail_with
        if key not in self.objects:
            raise ArtifactNotFoundError(key)
        return self.objects[key]

    async def head(self, key: str) -> ArtifactHead:
        stored = await self.get(key)
        return ArtifactHead(content_length=stored.content_length, metadata=stored.metadata)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove gateway settings from the process environment."""
    for name in GATEWAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def required_env(clean_env):
    """Provide the minimum environment for GatewayConfig()."""
    clean_env.setenv("AWS_ACCESS_KEY_ID", "minio")
    clean_env.setenv("AWS_SECRET_ACCESS_KEY", "minio123")
    clean_env.setenv("S3_BUCKET_NAME", "remote-cache")
    clean_env.setenv("TURBO_API_TOKEN", "test-token")
    return clean_env


@pytest.fixture
def memory_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def store_factory():
    """Factory for fresh stores, for tests that need one per example."""
    return InMemoryObjectStore


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend."""
    return "asyncio"
