"""Team scope resolution from query parameters."""

from fastapi import HTTPException, Query, status

TEAM_REQUIRED_DETAIL = "Either teamId or slug must be provided"


async def resolve_team(
    team_id: str | None = Query(default=None, alias="teamId"),
    slug: str | None = Query(default=None),
) -> str:
    """Resolve the team scope for a request; ``teamId`` wins over ``slug``.

    No format or existence check is made: any non-empty string is a team.
    """
    for candidate in (team_id, slug):
        if candidate:
            return candidate
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=TEAM_REQUIRED_DETAIL)
