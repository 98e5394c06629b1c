"""
NoteKeeper Backend — Notes Route Handlers
===========================================

What:  Owner-scoped note endpoints.
How:   Resolve the caller, validate input, delegate to NoteService, return
       JSON. Errors are raised and formatted by the global handlers.

Route Table:
    GET    /notes          → list names (ascending)
    POST   /notes          → create-or-ignore, 201 {"status": "created"}
    GET    /notes/{name}   → {id, name, content}
    PUT    /notes/{name}   → replace content, {"status": "updated"}
    DELETE /notes/{name}   → {"status": "deleted"}
    other methods          → 405 with Allow (after authentication)

Request bodies are read inside the handlers, after the credential
dependency has run, so that a bad token wins over a bad body and a
malformed body is a 400 that never reaches the note store.
"""

import re
from typing import List, Type, TypeVar
from urllib.parse import unquote_to_bytes

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.database import get_db_session
from notekeeper.exceptions import MethodNotAllowedError, ValidationError
from notekeeper.models.user import User
from notekeeper.routes.deps import get_current_user, get_note_service
from notekeeper.schemas.note import (
    ErrorResponse,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
    StatusResponse,
)
from notekeeper.services.note_service import NoteService

router = APIRouter(tags=["Notes"])

NOTES_METHODS = ("GET", "POST")
NOTE_METHODS = ("GET", "PUT", "DELETE")

NOTE_PATH_PREFIX = b"/notes/"

# '%' not followed by two hex digits
_BAD_ESCAPE = re.compile(rb"%(?![0-9A-Fa-f]{2})")

M = TypeVar("M", bound=BaseModel)

_AUTH_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


async def parse_json_body(request: Request, model: Type[M]) -> M:
    """
    Decode the request body into `model`.

    Empty bodies, malformed JSON and values of the wrong JSON type are all
    client errors (400).
    """
    raw = await request.body()
    try:
        return model.model_validate_json(raw)
    except PydanticValidationError:
        raise ValidationError(message="invalid json")


def extract_note_name(request: Request) -> str:
    """
    The note name: everything after `/notes/`, percent-decoded once.

    Read from the raw request path so an encoded slash (%2F) stays part of
    the name. An empty remainder, a broken escape, or bytes that are not
    UTF-8 are rejected with 400.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path:
        raw_path = raw_path.split(b"?", 1)[0]
    if raw_path and raw_path.startswith(NOTE_PATH_PREFIX):
        remainder = raw_path[len(NOTE_PATH_PREFIX):]
        if not remainder or _BAD_ESCAPE.search(remainder):
            raise ValidationError(message="invalid note name", field="name")
        try:
            return unquote_to_bytes(remainder).decode("utf-8")
        except UnicodeDecodeError:
            raise ValidationError(message="invalid note name", field="name")

    # Server did not pass raw_path; fall back to the already-decoded path
    name = request.path_params.get("name", "")
    if not name:
        raise ValidationError(message="invalid note name", field="name")
    return name


# ══════════════════════════════════════════════════════════════════════════
# /notes
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/notes",
    response_model=List[str],
    responses=_AUTH_ERRORS,
    summary="List the caller's note names",
)
async def list_notes(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    service: NoteService = Depends(get_note_service),
) -> List[str]:
    return await service.list_names(db, user.id)


@router.post(
    "/notes",
    status_code=201,
    response_model=StatusResponse,
    responses={400: {"description": "Bad body or empty name", "model": ErrorResponse}, **_AUTH_ERRORS},
    summary="Create a note (ignored if the name already exists)",
)
async def create_note(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    service: NoteService = Depends(get_note_service),
) -> StatusResponse:
    """
    Create a note unless the caller already has one with this name.

    A duplicate name still answers 201 "created" and keeps the stored
    content (create-or-ignore).
    """
    payload = await parse_json_body(request, NoteCreate)
    if not payload.name.strip():
        raise ValidationError(message="name required", field="name")

    await service.create(db, user.id, payload.name, payload.content)
    return StatusResponse(status="created")


@router.api_route(
    "/notes",
    methods=["PUT", "DELETE", "PATCH", "HEAD"],
    include_in_schema=False,
)
async def notes_method_not_allowed(user: User = Depends(get_current_user)) -> None:
    raise MethodNotAllowedError(allowed=NOTES_METHODS)


# ══════════════════════════════════════════════════════════════════════════
# /notes/{name}
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/notes/{name:path}",
    response_model=NoteResponse,
    responses={
        400: {"description": "Invalid note name", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Get a note by name",
)
async def get_note(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    name = extract_note_name(request)
    note = await service.get(db, user.id, name)
    return NoteResponse.model_validate(note)


@router.put(
    "/notes/{name:path}",
    response_model=StatusResponse,
    responses={
        400: {"description": "Invalid note name or body", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Replace a note's content",
)
async def update_note(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    service: NoteService = Depends(get_note_service),
) -> StatusResponse:
    name = extract_note_name(request)
    payload = await parse_json_body(request, NoteUpdate)

    await service.update(db, user.id, name, payload.content)
    return StatusResponse(status="updated")


@router.delete(
    "/notes/{name:path}",
    response_model=StatusResponse,
    responses={
        400: {"description": "Invalid note name", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Delete a note",
)
async def delete_note(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    service: NoteService = Depends(get_note_service),
) -> StatusResponse:
    name = extract_note_name(request)
    await service.delete(db, user.id, name)
    return StatusResponse(status="deleted")


@router.api_route(
    "/notes/{name:path}",
    methods=["POST", "PATCH", "HEAD"],
    include_in_schema=False,
)
async def note_method_not_allowed(
    request: Request,
    user: User = Depends(get_current_user),
) -> None:
    extract_note_name(request)
    raise MethodNotAllowedError(allowed=NOTE_METHODS)
