"""Client error shaping.

Every client error this API produces is a 400 whose body maps a field name to
a list of human readable messages, e.g.::

    {"displayName": ["displayName must be between 3 and 30 characters."]}
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..schemas import DISPLAY_NAME_MAX_LENGTH, DISPLAY_NAME_MIN_LENGTH
from ..services.users import UniquenessConflict

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def _field_name(loc: Sequence[Any], kind: str = "") -> str:
    # A malformed JSON body reports the byte offset, not a field.
    if kind == "json_invalid":
        return "body"
    parts = [str(part) for part in loc]
    if len(parts) > 1 and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or "body"


def _message(field: str, error: Dict[str, Any]) -> str:
    kind = error.get("type", "")
    if kind == "missing":
        return f"{field} is required."
    if field == "displayName" and kind in {"string_too_short", "string_too_long"}:
        return (
            f"{field} must be between {DISPLAY_NAME_MIN_LENGTH} and "
            f"{DISPLAY_NAME_MAX_LENGTH} characters."
        )
    return f"{field}: {error.get('msg', 'Invalid value')}."


def field_errors(errors: Sequence[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic/FastAPI validation errors by field."""

    shaped: Dict[str, List[str]] = {}
    for error in errors:
        field = _field_name(error.get("loc", ()), error.get("type", ""))
        message = _message(field, error)
        messages = shaped.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return shaped


def bad_request(errors: Dict[str, List[str]]) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=errors)


def conflict_response(conflict: UniquenessConflict) -> JSONResponse:
    return bad_request({conflict.field: [conflict.message]})


async def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    shaped = field_errors(exc.errors())
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, shaped)
    return bad_request(shaped)


def register_exception_handlers(app: FastAPI) -> None:
    """Render request validation failures as 400 field-keyed error maps."""

    app.add_exception_handler(RequestValidationError, _validation_exception_handler)


__all__ = [
    "bad_request",
    "conflict_response",
    "field_errors",
    "register_exception_handlers",
]
