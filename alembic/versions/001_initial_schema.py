"""001 – Initial schema: profiles, events, event_type enum.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000+01:00
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("event_type", ["holiday", "remote_work"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. profiles ───────────────────────────────────────────────────────
    # id is the identity provider's subject, so no server default
    op.execute("""
        CREATE TABLE profiles (
            id                      UUID PRIMARY KEY,
            email                   VARCHAR(320) UNIQUE,
            display_name            VARCHAR(100) NOT NULL,
            partner_id              UUID REFERENCES profiles(id) ON DELETE SET NULL,
            holiday_allowance_days  NUMERIC(4,1) NOT NULL DEFAULT 25,
            remote_work_days        NUMERIC(4,1) NOT NULL DEFAULT 0,
            holiday_reset_day       SMALLINT NOT NULL DEFAULT 1,
            holiday_reset_month     SMALLINT NOT NULL DEFAULT 1,
            remote_work_reset_day   SMALLINT NOT NULL DEFAULT 1,
            remote_work_reset_month SMALLINT NOT NULL DEFAULT 1,
            created_at              TIMESTAMPTZ DEFAULT NOW(),
            updated_at              TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_profile_holiday_allowance
                CHECK (holiday_allowance_days >= 0),
            CONSTRAINT ck_profile_remote_work_allowance
                CHECK (remote_work_days >= 0),
            CONSTRAINT ck_profile_holiday_reset_day
                CHECK (holiday_reset_day BETWEEN 1 AND 31),
            CONSTRAINT ck_profile_holiday_reset_month
                CHECK (holiday_reset_month BETWEEN 1 AND 12),
            CONSTRAINT ck_profile_remote_work_reset_day
                CHECK (remote_work_reset_day BETWEEN 1 AND 31),
            CONSTRAINT ck_profile_remote_work_reset_month
                CHECK (remote_work_reset_month BETWEEN 1 AND 12)
        )
    """)
    op.execute("CREATE UNIQUE INDEX ix_profiles_email_lower ON profiles (LOWER(email))")
    op.execute("CREATE UNIQUE INDEX uq_profiles_partner_id ON profiles (partner_id)")

    # ── 2. events ─────────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE events (
            id              UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            user_ids        JSONB NOT NULL,
            type            event_type NOT NULL,
            name            VARCHAR(200),
            start_date      DATE NOT NULL,
            end_date        DATE NOT NULL,
            start_half_day  BOOLEAN NOT NULL DEFAULT FALSE,
            end_half_day    BOOLEAN NOT NULL DEFAULT FALSE,
            created_by      UUID REFERENCES profiles(id) ON DELETE SET NULL,
            created_at      TIMESTAMPTZ DEFAULT NOW(),
            updated_at      TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_event_date_order CHECK (end_date >= start_date)
        )
    """)
    op.execute(
        "CREATE INDEX ix_events_type_dates ON events (type, start_date, end_date)"
    )
    op.execute("CREATE INDEX ix_events_user_ids ON events USING GIN (user_ids)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS events CASCADE")
    op.execute("DROP TABLE IF EXISTS profiles CASCADE")

    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)

    op.execute('DROP EXTENSION IF EXISTS "uuid-ossp"')
