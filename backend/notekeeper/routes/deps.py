"""
NoteKeeper Backend — Route Dependencies
=========================================

What:  FastAPI dependencies shared by the route modules.
How:   Services are built once by the application factory and kept on
       `app.state`; these functions hand them (and the resolved caller) to
       handlers through Depends().
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.database import get_db_session
from notekeeper.models.user import User
from notekeeper.services.auth_service import CredentialResolver
from notekeeper.services.note_service import NoteService


def get_credential_resolver(request: Request) -> CredentialResolver:
    return request.app.state.credential_resolver


def get_note_service(request: Request) -> NoteService:
    return request.app.state.note_service


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db_session),
    resolver: CredentialResolver = Depends(get_credential_resolver),
) -> User:
    """
    Resolve the caller from the Authorization header.

    Raises AuthenticationError (401) or AuthResolverError (500); the global
    exception handlers turn them into responses.
    """
    return await resolver.resolve(db, authorization)
