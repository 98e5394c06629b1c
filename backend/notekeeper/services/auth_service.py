"""
NoteKeeper Backend — Credential Resolver
==========================================

What:  Turns an `Authorization: Bearer <token>` header into a User.
Why:   Every note endpoint is scoped to the caller; this is the gate.
How:   Parse the header, then perform exactly one token lookup against the
       users table, bounded by the store timeout.
Who:   Called by the `get_current_user` route dependency.

Outcomes:
    header missing / wrong scheme / empty token → AuthenticationError (401)
    token not found                             → AuthenticationError (401)
    lookup failed or timed out                  → AuthResolverError   (500)
    token found                                 → User

No caching and no writes: tokens are issued and rotated elsewhere, and a
revoked token must stop working on the very next request.
"""

import asyncio
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.exceptions import AuthenticationError, AuthResolverError
from notekeeper.models.user import User

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def parse_bearer_token(header: Optional[str]) -> Optional[str]:
    """
    Extract the token from an Authorization header value.

    The scheme and the token are separated by the first single space; the
    scheme is matched case-insensitively and the token is trimmed.

    Returns None when no usable token is present.
    """
    if not header:
        return None

    scheme, sep, rest = header.partition(" ")
    if not sep or scheme.lower() != BEARER_SCHEME:
        return None

    token = rest.strip()
    return token or None


class CredentialResolver:
    """
    Resolves bearer credentials to users.

    Stateless apart from the timeout; one instance serves all requests.
    """

    def __init__(self, timeout_seconds: float = 3.0):
        self.timeout_seconds = timeout_seconds

    async def resolve(self, db: AsyncSession, authorization: Optional[str]) -> User:
        """
        Resolve the Authorization header value to a User.

        Raises:
            AuthenticationError: No usable token, or the token is unknown
            AuthResolverError: The lookup itself failed
        """
        token = parse_bearer_token(authorization)
        if token is None:
            raise AuthenticationError("missing or invalid bearer token")

        try:
            result = await asyncio.wait_for(
                db.execute(select(User).where(User.token == token)),
                timeout=self.timeout_seconds,
            )
            user = result.scalars().first()
        except asyncio.TimeoutError:
            logger.error("Token lookup timed out after %.1fs", self.timeout_seconds)
            raise AuthResolverError(context={"reason": "timeout"})
        except Exception as e:
            logger.error("Token lookup failed: %s", str(e), exc_info=True)
            raise AuthResolverError(context={"error_type": type(e).__name__})

        if user is None:
            raise AuthenticationError("invalid token")

        return user
