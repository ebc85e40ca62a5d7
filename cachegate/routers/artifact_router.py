"""v8 artifacts API endpoints.

Routers handle HTTP concerns only - no business logic.
All business logic is delegated to ArtifactService.
"""

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from cachegate.models.artifacts import (
    ArtifactQueryRequest,
    ArtifactStatusResponse,
    ArtifactUploadResponse,
    EventsResponse,
)
from cachegate.security.bearer import BearerTokenAuth
from cachegate.security.team import resolve_team
from cachegate.services.artifact_service import (
    INVALID_EVENT_DATA,
    InvalidArtifactRequestError,
    parse_content_length,
)
from cachegate.storage.object_store import ArtifactNotFoundError, StorageError

if TYPE_CHECKING:
    from cachegate.services.artifact_service import ArtifactService

logger = logging.getLogger(__name__)

ARTIFACT_NOT_FOUND = "Artifact not found"
UPLOAD_FAILED = "Failed to upload artifact"
QUERY_FAILED = "Failed to query artifacts"
INVALID_REQUEST_BODY = "Invalid request body"

ARTIFACT_TAG_HEADER = "x-artifact-tag"
ARTIFACT_DURATION_HEADER = "x-artifact-duration"


def create_artifact_router(
    artifact_service: "ArtifactService",
    *,
    api_token: str,
) -> APIRouter:
    """Create artifacts router with injected service.

    Every route requires the bearer token; every route except status also
    requires a team scope.

    Args:
        artifact_service: ArtifactService instance for business logic
        api_token: Shared bearer token clients must present

    Returns:
        APIRouter with the v8 artifact endpoints configured
    """
    router = APIRouter(
        prefix="/v8/artifacts",
        tags=["artifacts"],
        dependencies=[Depends(BearerTokenAuth(api_token))],
    )

    @router.post("/events", response_model=EventsResponse)
    async def record_events(request: Request, team: str = Depends(resolve_team)) -> EventsResponse:
        """Validate and discard cache usage events.

        Raises:
            HTTPException: 400 if the body or any event is invalid
        """
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail=INVALID_EVENT_DATA)

        try:
            await artifact_service.record_events(team, body)
        except InvalidArtifactRequestError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return EventsResponse()

    @router.get("/status", response_model=ArtifactStatusResponse)
    async def get_status() -> ArtifactStatusResponse:
        """Report remote caching status; always enabled."""
        return ArtifactStatusResponse()

    @router.post("")
    async def query_artifacts(request: Request, team: str = Depends(resolve_team)) -> JSONResponse:
        """Look up size, duration and tag for a batch of hashes.

        Per-hash misses are reported inline; only a malformed body fails the
        request.

        Raises:
            HTTPException: 400 for a malformed body, 500 for unexpected errors
        """
        try:
            payload = ArtifactQueryRequest.model_validate(await request.json())
        except ValueError:
            raise HTTPException(status_code=400, detail=INVALID_REQUEST_BODY)

        try:
            results = await artifact_service.query(team, payload.hashes)
        except Exception:
            logger.exception("Error querying artifacts (team=%s)", team)
            raise HTTPException(status_code=500, detail=QUERY_FAILED)

        return JSONResponse({h: result.to_dict() for h, result in results.items()})

    @router.put(
        "/{artifact_hash}",
        status_code=status.HTTP_202_ACCEPTED,
        response_model=ArtifactUploadResponse,
    )
    async def upload_artifact(
        artifact_hash: str,
        request: Request,
        team: str = Depends(resolve_team),
    ) -> ArtifactUploadResponse:
        """Upload an artifact.

        The Content-Length header is checked before the body is read.

        Raises:
            HTTPException: 400 for a bad Content-Length, 500 if storage fails
        """
        try:
            content_length = parse_content_length(request.headers.get("content-length"))
        except InvalidArtifactRequestError as e:
            raise HTTPException(status_code=400, detail=str(e))

        body = await request.body()
        try:
            urls = await artifact_service.upload(
                team,
                artifact_hash,
                body,
                content_length=content_length,
                duration=request.headers.get(ARTIFACT_DURATION_HEADER),
                tag=request.headers.get(ARTIFACT_TAG_HEADER),
            )
        except StorageError:
            raise HTTPException(status_code=500, detail=UPLOAD_FAILED)
        except Exception:
            logger.exception("Error uploading artifact (team=%s hash=%s)", team, artifact_hash)
            raise HTTPException(status_code=500, detail=UPLOAD_FAILED)

        return ArtifactUploadResponse(urls=urls)

    @router.api_route("/{artifact_hash}", methods=["GET", "HEAD"])
    async def download_artifact(
        artifact_hash: str,
        request: Request,
        team: str = Depends(resolve_team),
    ) -> Response:
        """Download an artifact (GET) or check that it exists (HEAD).

        Any failure, including an unreachable store, is reported as 404.

        Raises:
            HTTPException: 404 if the artifact cannot be served
        """
        is_head = request.method == "HEAD"
        try:
            if is_head:
                artifact = await artifact_service.exists(team, artifact_hash)
                body = b""
            else:
                artifact = await artifact_service.download(team, artifact_hash)
                body = artifact.body
        except ArtifactNotFoundError:
            raise HTTPException(status_code=404, detail=ARTIFACT_NOT_FOUND)
        except Exception:
            logger.exception("Error downloading artifact (team=%s hash=%s)", team, artifact_hash)
            raise HTTPException(status_code=404, detail=ARTIFACT_NOT_FOUND)

        headers = {"Content-Length": str(artifact.content_length)}
        if artifact.metadata.tag:
            headers[ARTIFACT_TAG_HEADER] = artifact.metadata.tag
        return Response(content=body, media_type="application/octet-stream", headers=headers)

    return router
