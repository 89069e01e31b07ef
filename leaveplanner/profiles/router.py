"""Profile router — signup, own settings, partner linking, household.

Signup only needs a valid identity token; everything else needs a profile.
"""


from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from leaveplanner.auth.dependencies import (
    TokenIdentity,
    get_current_profile,
    get_token_identity,
)
from leaveplanner.common.exceptions import ValidationException
from leaveplanner.common.rate_limit import limiter
from leaveplanner.database import get_db
from leaveplanner.profiles.models import Profile
from leaveplanner.profiles.schemas import (
    HouseholdOut,
    PartnerLinkRequest,
    ProfileCreate,
    ProfileOut,
    ProfileUpdate,
)
from leaveplanner.profiles.service import ProfileService

router = APIRouter(prefix="", tags=["profiles"])


# ── POST / (signup) ─────────────────────────────────────────────────

@router.post("", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
async def create_profile(
    body: ProfileCreate,
    identity: TokenIdentity = Depends(get_token_identity),
    db: AsyncSession = Depends(get_db),
):
    """Create the caller's profile after signing up with the identity provider."""
    email = identity.email or body.email
    if email is None:
        raise ValidationException({"email": ["An email address is required."]})
    return await ProfileService.create_profile(db, identity.subject, email, body)


# ── GET /me ─────────────────────────────────────────────────────────

@router.get("/me", response_model=ProfileOut)
async def get_me(profile: Profile = Depends(get_current_profile)):
    """Return the caller's profile and settings."""
    return ProfileOut.model_validate(profile)


# ── PATCH /me ───────────────────────────────────────────────────────

@router.patch("/me", response_model=ProfileOut)
async def update_me(
    body: ProfileUpdate,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    """Edit display name, allowances and reset dates."""
    return await ProfileService.update_profile(db, profile, body)


# ── POST /me/partner ────────────────────────────────────────────────

@router.post("/me/partner", response_model=ProfileOut)
@limiter.limit("20/minute")
async def link_partner(
    request: Request,
    body: PartnerLinkRequest,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    """Link accounts with a partner who has already signed up."""
    return await ProfileService.link_partner(db, profile, body.partner_email)


# ── DELETE /me/partner ──────────────────────────────────────────────

@router.delete("/me/partner", response_model=ProfileOut)
async def unlink_partner(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    """Remove the partner link on both accounts."""
    return await ProfileService.unlink_partner(db, profile)


# ── GET /household ──────────────────────────────────────────────────

@router.get("/household", response_model=HouseholdOut)
async def get_household(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    """The caller and their linked partner, if any."""
    return await ProfileService.get_household_out(db, profile)
