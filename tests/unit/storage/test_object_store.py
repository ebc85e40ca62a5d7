"""Unit tests for the S3-backed ObjectStore.

The boto3 client is a mock; failures are real botocore exceptions so the
error translation is exercised exactly as in production.
"""

import io
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from cachegate.models.artifacts import ArtifactMetadata
from cachegate.storage.object_store import (
    ArtifactNotFoundError,
    ObjectStore,
    StorageError,
    artifact_key,
)

BUCKET = "remote-cache"


def client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} message"}}, operation)


@pytest.fixture
def s3_client():
    return MagicMock()


@pytest.fixture
def store(s3_client):
    return ObjectStore(s3_client, BUCKET)


def test_artifact_key_is_team_scoped():
    assert artifact_key("team-a", "abc123") == "artifacts/team-a/abc123"
    assert artifact_key("team-a", "abc123") != artifact_key("team-b", "abc123")


class TestPut:
    @pytest.mark.asyncio
    async def test_put_passes_declared_length_and_metadata(self, store, s3_client):
        await store.put(
            "artifacts/t1/abc",
            b"hello",
            5,
            ArtifactMetadata(duration_ms=100, tag="build-1"),
        )

        s3_client.put_object.assert_called_once_with(
            Bucket=BUCKET,
            Key="artifacts/t1/abc",
            Body=b"hello",
            ContentLength=5,
            Metadata={"duration": "100", "tag": "build-1"},
        )

    @pytest.mark.asyncio
    async def test_put_omits_missing_tag(self, store, s3_client):
        await store.put("artifacts/t1/abc", b"x", 1, ArtifactMetadata())

        metadata = s3_client.put_object.call_args.kwargs["Metadata"]
        assert metadata == {"duration": "0"}

    @pytest.mark.asyncio
    async def test_put_failure_raises_storage_error(self, store, s3_client):
        s3_client.put_object.side_effect = client_error("AccessDenied", "PutObject")

        with pytest.raises(StorageError) as exc_info:
            await store.put("artifacts/t1/abc", b"x", 1, ArtifactMetadata())

        assert exc_info.value.code == "AccessDenied"
        assert exc_info.value.key == "artifacts/t1/abc"

    @pytest.mark.asyncio
    async def test_put_never_reports_not_found(self, store, s3_client):
        s3_client.put_object.side_effect = client_error("NotFound", "PutObject")

        with pytest.raises(StorageError):
            await store.put("artifacts/t1/abc", b"x", 1, ArtifactMetadata())


class TestGet:
    @pytest.mark.asyncio
    async def test_get_returns_bytes_length_and_metadata(self, store, s3_client):
        s3_client.get_object.return_value = {
            "Body": io.BytesIO(b"hello"),
            "ContentLength": 5,
            "Metadata": {"duration": "250", "tag": "build-1"},
        }

        artifact = await store.get("artifacts/t1/abc")

        s3_client.get_object.assert_called_once_with(Bucket=BUCKET, Key="artifacts/t1/abc")
        assert artifact.body == b"hello"
        assert artifact.content_length == 5
        assert artifact.metadata.duration_ms == 250
        assert artifact.metadata.tag == "build-1"

    @pytest.mark.asyncio
    async def test_get_without_metadata(self, store, s3_client):
        s3_client.get_object.return_value = {"Body": io.BytesIO(b"ab"), "ContentLength": 2}

        artifact = await store.get("artifacts/t1/abc")

        assert artifact.metadata.duration_ms == 0
        assert artifact.metadata.tag is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["NoSuchKey", "404", "NotFound"])
    async def test_get_missing_key(self, store, s3_client, code):
        s3_client.get_object.side_effect = client_error(code, "GetObject")

        with pytest.raises(ArtifactNotFoundError):
            await store.get("artifacts/t1/missing")

    @pytest.mark.asyncio
    async def test_get_connection_failure_is_storage_error(self, store, s3_client):
        s3_client.get_object.side_effect = EndpointConnectionError(
            endpoint_url="http://localhost:9000"
        )

        with pytest.raises(StorageError) as exc_info:
            await store.get("artifacts/t1/abc")

        assert exc_info.value.code == "EndpointConnectionError"


class TestHead:
    @pytest.mark.asyncio
    async def test_head_returns_size_and_metadata(self, store, s3_client):
        s3_client.head_object.return_value = {
            "ContentLength": 42,
            "Metadata": {"duration": "7"},
        }

        head = await store.head("artifacts/t1/abc")

        s3_client.head_object.assert_called_once_with(Bucket=BUCKET, Key="artifacts/t1/abc")
        assert head.content_length == 42
        assert head.metadata.duration_ms == 7
        assert head.metadata.tag is None

    @pytest.mark.asyncio
    async def test_head_unparseable_duration_is_zero(self, store, s3_client):
        s3_client.head_object.return_value = {
            "ContentLength": 1,
            "Metadata": {"duration": "NaN"},
        }

        head = await store.head("artifacts/t1/abc")

        assert head.metadata.duration_ms == 0

    @pytest.mark.asyncio
    async def test_head_missing_key(self, store, s3_client):
        s3_client.head_object.side_effect = client_error("404")

        with pytest.raises(ArtifactNotFoundError):
            await store.head("artifacts/t1/missing")

    @pytest.mark.asyncio
    async def test_head_permission_error_is_storage_error(self, store, s3_client):
        s3_client.head_object.side_effect = client_error("403")

        with pytest.raises(StorageError):
            await store.head("artifacts/t1/abc")
