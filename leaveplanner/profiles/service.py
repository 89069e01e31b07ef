"""Profile service layer — signup, settings edits and partner linking.

Business logic:
  - One profile per identity-provider subject and per email
  - Partner linkage is symmetric: both sides are written together
  - A profile is linked to at most one partner
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from leaveplanner.common.exceptions import (
    ConflictError,
    NotFoundException,
    ValidationException,
)
from leaveplanner.profiles.models import Profile
from leaveplanner.profiles.schemas import (
    HouseholdOut,
    ProfileBrief,
    ProfileCreate,
    ProfileOut,
    ProfileUpdate,
    check_reset_date,
)

logger = logging.getLogger(__name__)


class ProfileService:
    """Async profile operations: signup, settings, household linkage."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_by_email(db: AsyncSession, email: str) -> Optional[Profile]:
        result = await db.execute(
            select(Profile).where(func.lower(Profile.email) == email.lower())
        )
        return result.scalars().first()

    @staticmethod
    async def get_household(db: AsyncSession, profile: Profile) -> list[Profile]:
        """Return ``[profile]`` or ``[profile, partner]``."""
        members = [profile]
        if profile.partner_id:
            partner = await db.get(Profile, profile.partner_id)
            if partner is not None:
                members.append(partner)
        return members

    @staticmethod
    async def get_household_ids(db: AsyncSession, profile: Profile) -> set[uuid.UUID]:
        return {p.id for p in await ProfileService.get_household(db, profile)}

    # ─────────────────────────────────────────────────────────────────
    # Signup / read
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_profile(
        db: AsyncSession,
        subject: uuid.UUID,
        email: Optional[str],
        data: ProfileCreate,
    ) -> ProfileOut:
        """Create the profile for a newly signed-up identity."""

        if await db.get(Profile, subject) is not None:
            raise ConflictError(
                "A profile already exists for this account.",
                {"id": [f"'{subject}' is already registered."]},
            )
        if email and await ProfileService._get_by_email(db, email) is not None:
            raise ConflictError(
                "A profile already exists for this email.",
                {"email": [f"'{email}' is already in use."]},
            )

        profile = Profile(id=subject, email=email, **data.model_dump(exclude={"email"}))
        db.add(profile)
        await db.flush()
        await db.refresh(profile)

        logger.info("Created profile %s", profile.id)
        return ProfileOut.model_validate(profile)

    @staticmethod
    async def get_profile(db: AsyncSession, profile_id: uuid.UUID) -> ProfileOut:
        profile = await db.get(Profile, profile_id)
        if profile is None:
            raise NotFoundException("Profile", str(profile_id))
        return ProfileOut.model_validate(profile)

    @staticmethod
    async def get_household_out(db: AsyncSession, profile: Profile) -> HouseholdOut:
        members = await ProfileService.get_household(db, profile)
        return HouseholdOut(
            members=[ProfileBrief.model_validate(m) for m in members],
            is_linked=len(members) > 1,
        )

    # ─────────────────────────────────────────────────────────────────
    # Settings
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def update_profile(
        db: AsyncSession,
        profile: Profile,
        data: ProfileUpdate,
    ) -> ProfileOut:
        """Apply a partial settings edit. Existing events are not revalidated."""

        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        errors: dict[str, list[str]] = {}
        for label, prefix in (("Holiday", "holiday"), ("Remote work", "remote_work")):
            day = changes.get(f"{prefix}_reset_day", getattr(profile, f"{prefix}_reset_day"))
            month = changes.get(
                f"{prefix}_reset_month", getattr(profile, f"{prefix}_reset_month"),
            )
            try:
                check_reset_date(day, month, label)
            except ValueError as exc:
                errors[f"{prefix}_reset_day"] = [str(exc)]
        if errors:
            raise ValidationException(errors)

        for field, value in changes.items():
            setattr(profile, field, value)

        await db.flush()
        await db.refresh(profile)

        logger.info("Updated profile %s: %s", profile.id, ", ".join(sorted(changes)))
        return ProfileOut.model_validate(profile)

    # ─────────────────────────────────────────────────────────────────
    # Partner linkage
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def link_partner(
        db: AsyncSession,
        profile: Profile,
        partner_email: str,
    ) -> ProfileOut:
        """Link *profile* and the profile registered under *partner_email*."""

        partner = await ProfileService._get_by_email(db, partner_email)
        if partner is None:
            raise NotFoundException("Profile", partner_email)

        if partner.id == profile.id:
            raise ValidationException(
                {"partner_email": ["You cannot link to yourself."]}
            )

        # Lock both rows and re-read them so a concurrent link is seen.
        result = await db.execute(
            select(Profile)
            .where(Profile.id.in_([profile.id, partner.id]))
            .order_by(Profile.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        locked = {p.id: p for p in result.scalars().all()}
        profile, partner = locked[profile.id], locked[partner.id]

        if profile.partner_id is not None:
            raise ConflictError(
                "You are already linked to a partner.",
                {"partner_id": ["Unlink your current partner first."]},
            )
        if partner.partner_id is not None:
            raise ConflictError(
                "That person is already linked to someone else.",
                {"partner_email": [f"'{partner_email}' is already linked."]},
            )

        profile.partner_id = partner.id
        partner.partner_id = profile.id
        try:
            await db.flush()
        except IntegrityError as exc:
            await db.rollback()
            err = str(exc.orig)
            if "uq_profiles_partner_id" in err or "partner_id" in err:
                raise ConflictError(
                    "That person is already linked to someone else.",
                    {"partner_email": [f"'{partner_email}' is already linked."]},
                )
            raise
        await db.refresh(profile)

        logger.info("Linked profiles %s and %s", profile.id, partner.id)
        return ProfileOut.model_validate(profile)

    @staticmethod
    async def unlink_partner(db: AsyncSession, profile: Profile) -> ProfileOut:
        """Remove the link on both sides."""

        if profile.partner_id is None:
            raise ValidationException({"partner_id": ["You are not linked to a partner."]})

        partner = await db.get(Profile, profile.partner_id)
        if partner is not None and partner.partner_id == profile.id:
            partner.partner_id = None
        old_partner_id = profile.partner_id
        profile.partner_id = None
        await db.flush()
        await db.refresh(profile)

        logger.info("Unlinked profiles %s and %s", profile.id, old_partner_id)
        return ProfileOut.model_validate(profile)
