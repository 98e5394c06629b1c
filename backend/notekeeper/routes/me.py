"""
NoteKeeper Backend — Identity Route
=====================================

What:  GET /me returns the user the bearer token resolves to.
Who:   Front-ends use it to validate a stored token and show the username.

Any other method is rejected with 405 before the credential is checked.
"""

from fastapi import APIRouter, Depends

from notekeeper.exceptions import MethodNotAllowedError
from notekeeper.models.user import User
from notekeeper.routes.deps import get_current_user
from notekeeper.schemas.note import ErrorResponse
from notekeeper.schemas.user import UserResponse

router = APIRouter(tags=["Identity"])

ME_METHODS = ("GET",)


@router.get(
    "/me",
    response_model=UserResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Resolve the caller's identity",
)
async def get_me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)


@router.api_route(
    "/me",
    methods=["POST", "PUT", "DELETE", "PATCH", "HEAD"],
    include_in_schema=False,
)
async def me_method_not_allowed() -> None:
    raise MethodNotAllowedError(allowed=ME_METHODS)
