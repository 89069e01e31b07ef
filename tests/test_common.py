"""Common module tests — colours, display names, problem details, token decoding."""

from __future__ import annotations

import uuid

import pytest

from leaveplanner.auth.dependencies import decode_token
from leaveplanner.common.colors import _hash_id, user_color
from leaveplanner.common.constants import USER_COLORS, EventType, event_type_display_name
from leaveplanner.common.exceptions import UnauthorizedException
from leaveplanner.config import settings
from tests.conftest import create_access_token


class TestUserColor:
    def test_string_hash_matches_32_bit_rolling_hash(self):
        assert _hash_id("hello") == 99162322
        assert _hash_id("polygenelubricants") == -2147483648
        assert _hash_id("") == 0

    def test_colour_is_from_palette(self):
        for _ in range(50):
            assert user_color(uuid.uuid4()) in USER_COLORS

    def test_stable_for_same_id(self):
        user_id = uuid.uuid4()
        assert user_color(user_id) == user_color(str(user_id))

    def test_known_value(self):
        assert user_color("a") == USER_COLORS[97 % len(USER_COLORS)]


class TestEventTypeDisplayName:
    def test_names(self):
        assert event_type_display_name(EventType.holiday) == "holiday"
        assert event_type_display_name("remote_work") == "Remote work"


class TestDecodeToken:
    def test_valid(self):
        subject = uuid.uuid4()
        identity = decode_token(create_access_token(subject, "a@example.com"))
        assert identity.subject == subject
        assert identity.email == "a@example.com"

    def test_email_optional(self):
        assert decode_token(create_access_token(uuid.uuid4())).email is None

    def test_expired(self):
        with pytest.raises(UnauthorizedException, match="expired"):
            decode_token(create_access_token(uuid.uuid4(), expired=True))

    def test_garbage(self):
        with pytest.raises(UnauthorizedException):
            decode_token("not.a.jwt")


class TestProblemDetails:
    async def test_not_found_body(self, client, auth_headers):
        missing = uuid.uuid4()
        resp = await client.get(f"/api/v1/events/{missing}", headers=auth_headers)

        assert resp.status_code == 404
        body = resp.json()
        assert body["type"] == "https://leave-planner.app/errors/not-found"
        assert body["title"] == "Event Not Found"
        assert body["instance"] == f"/api/v1/events/{missing}"
        assert str(missing) in body["detail"]

    async def test_request_validation_body(self, client, auth_headers):
        resp = await client.post(
            "/api/v1/events", json={"type": "sabbatical"}, headers=auth_headers,
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["type"].endswith("/validation-error")
        assert "type" in body["errors"]
        assert "start_date" in body["errors"]


class TestDefaultRateLimit:
    async def test_default_limit_applies_to_unannotated_routes(self, client):
        allowed = int(settings.RATE_LIMIT_DEFAULT.split("/")[0])
        for _ in range(allowed):
            resp = await client.get("/api/v1/balances")
            assert resp.status_code == 401

        resp = await client.get("/api/v1/balances")
        assert resp.status_code == 429

    async def test_health_is_exempt(self, client):
        allowed = int(settings.RATE_LIMIT_DEFAULT.split("/")[0])
        for _ in range(allowed + 5):
            resp = await client.get("/api/v1/health")
            assert resp.status_code == 200
