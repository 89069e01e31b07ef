"""Auth dependencies — bearer JWT validation and profile resolution.

Tokens are minted by the external identity provider; this service only
verifies the signature and maps the ``sub`` claim onto a Profile id.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from leaveplanner.common.exceptions import UnauthorizedException
from leaveplanner.config import settings
from leaveplanner.database import get_db
from leaveplanner.profiles.models import Profile


@dataclass(frozen=True)
class TokenIdentity:
    """Who the bearer token says the caller is."""

    subject: uuid.UUID
    email: Optional[str] = None


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthorizedException("Missing or invalid Authorization header.")
    return auth_header[7:]


def decode_token(token: str) -> TokenIdentity:
    """Verify *token* and return the identity it carries."""
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired.")
    except JWTError:
        raise UnauthorizedException("Invalid token.")

    try:
        subject = uuid.UUID(str(payload["sub"]))
    except (KeyError, ValueError):
        raise UnauthorizedException("Token subject is missing or malformed.")

    return TokenIdentity(subject=subject, email=payload.get("email"))


# ── Core dependencies ───────────────────────────────────────────────

async def get_token_identity(request: Request) -> TokenIdentity:
    """Validate the bearer token without requiring a profile (used by signup)."""
    return decode_token(_extract_bearer(request))


async def get_current_profile(
    identity: TokenIdentity = Depends(get_token_identity),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Return the authenticated caller's Profile."""
    profile = await db.get(Profile, identity.subject)
    if profile is None:
        raise UnauthorizedException("No profile exists for this account; sign up first.")
    return profile
