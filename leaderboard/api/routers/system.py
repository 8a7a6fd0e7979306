"""System-level API endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from ...schemas import DISPLAY_NAME_MAX_LENGTH, DISPLAY_NAME_MIN_LENGTH

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, bool]:
    """Simple readiness probe."""

    return {"ok": True}


@router.get("/config")
def get_config(request: Request) -> Dict[str, Any]:
    """Expose values clients need to validate input up front."""

    return {
        "ranking_policy": request.app.state.ranking_policy.value,
        "display_name_min_length": DISPLAY_NAME_MIN_LENGTH,
        "display_name_max_length": DISPLAY_NAME_MAX_LENGTH,
    }


__all__ = ["router"]
