"""Pydantic schemas for request validation and response serialization."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DISPLAY_NAME_MIN_LENGTH = 3
DISPLAY_NAME_MAX_LENGTH = 30

# Signed 64-bit, the widest integer the database column stores.
POINTS_MIN = -(2**63)
POINTS_MAX = 2**63 - 1


# ── Request Schemas ──────────────────────────────────────────────

class UserCreate(BaseModel):
    """Request body for creating a user."""

    model_config = ConfigDict(populate_by_name=True)

    display_name: str = Field(
        ...,
        alias="displayName",
        min_length=DISPLAY_NAME_MIN_LENGTH,
        max_length=DISPLAY_NAME_MAX_LENGTH,
        description="Unique name shown on the leaderboard",
    )


class UserUpdate(BaseModel):
    """Request body for setting a user's points."""

    points: int = Field(
        default=0,
        ge=POINTS_MIN,
        le=POINTS_MAX,
        description="The amount of points the user should have once updated",
    )


# ── Response Schemas ─────────────────────────────────────────────

class UserRead(BaseModel):
    """A user together with its current rank."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    display_name: str = Field(..., alias="displayName")
    points: int
    rank: int


__all__ = [
    "DISPLAY_NAME_MAX_LENGTH",
    "DISPLAY_NAME_MIN_LENGTH",
    "POINTS_MAX",
    "POINTS_MIN",
    "UserCreate",
    "UserRead",
    "UserUpdate",
]
