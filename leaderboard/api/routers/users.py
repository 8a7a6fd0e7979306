"""User and ranking endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlmodel import Session

from ...core import get_session
from ...schemas import UserCreate, UserRead, UserUpdate
from ...services.ranking import RankedUser, RankingService
from ...services.users import UniquenessConflict
from ..errors import conflict_response

router = APIRouter(prefix="/api/user", tags=["users"])


def get_ranking_service(
    request: Request, session: Session = Depends(get_session)
) -> RankingService:
    """FastAPI dependency building a service with the app's ranking policy."""

    return RankingService(session, request.app.state.ranking_policy)


def _to_read(entry: RankedUser) -> UserRead:
    return UserRead(
        id=entry.id,
        display_name=entry.display_name,
        points=entry.points,
        rank=entry.rank,
    )


@router.get("", response_model=List[UserRead])
def list_users(service: RankingService = Depends(get_ranking_service)):
    """List every user, best rank first."""

    return [_to_read(entry) for entry in service.list_ranked()]


@router.get("/{user_id}", response_model=UserRead, name="get_user")
def get_user(user_id: int, service: RankingService = Depends(get_ranking_service)):
    """Get a single user with its rank among all users."""

    entry = service.get_ranked(user_id)
    if entry is None:
        raise HTTPException(404, "User not found")
    return _to_read(entry)


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid or already used displayName"}},
)
def create_user(
    body: UserCreate,
    request: Request,
    response: Response,
    service: RankingService = Depends(get_ranking_service),
):
    """Create a user with zero points."""

    result = service.create_user(body.display_name)
    if isinstance(result, UniquenessConflict):
        return conflict_response(result)
    if result is None:
        # Removed by a concurrent request between insert and read-back.
        raise HTTPException(404, "User not found")

    response.headers["Location"] = str(request.url_for("get_user", user_id=result.id))
    return _to_read(result)


@router.put(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def update_user(
    user_id: int,
    body: UserUpdate,
    service: RankingService = Depends(get_ranking_service),
):
    """Set a user's points."""

    if not service.update_points(user_id, body.points):
        raise HTTPException(404, "User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def delete_user(user_id: int, service: RankingService = Depends(get_ranking_service)):
    """Delete a user permanently."""

    if not service.delete_user(user_id):
        raise HTTPException(404, "User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_all_users(service: RankingService = Depends(get_ranking_service)):
    """Delete every user."""

    service.delete_all()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["get_ranking_service", "router"]
