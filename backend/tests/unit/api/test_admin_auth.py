"""Unit tests for admin-code authentication helpers.

Run with: pytest backend/tests/unit/api/test_admin_auth.py -v
"""

import hashlib
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from calldesk.api import AuthenticationError, BadRequestError
from calldesk.api.auth import (
    authenticate_area,
    get_client_ip,
    hash_admin_code,
    resolve_campaign,
)


def _session_returning(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    session = AsyncMock()
    session.execute.return_value = result
    return session


def _sql(session) -> str:
    stmt = session.execute.await_args.args[0]
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestHashAdminCode:
    """Tests for admin code hashing."""

    def test_plain_code_is_sha512(self):
        assert hash_admin_code("password") == hashlib.sha512(b"password").hexdigest()

    def test_already_hashed_is_passed_through(self):
        digest = hashlib.sha512(b"password").hexdigest()

        assert hash_admin_code(digest, already_hashed=True) == digest

    @pytest.mark.parametrize("code", ["password", "ABC" * 40, "a" * 127])
    def test_already_hashed_must_be_a_digest(self, code):
        with pytest.raises(BadRequestError) as exc_info:
            hash_admin_code(code, already_hashed=True)

        assert exc_info.value.message == "bad hash for admin code"
        assert exc_info.value.status_code == 400


class TestAuthenticateArea:
    """Tests for area lookup by admin hash."""

    @pytest.mark.asyncio
    async def test_returns_area_id(self):
        area_id = uuid4()
        session = _session_returning(area_id)

        assert await authenticate_area(session, area_id, "f" * 128) == area_id
        assert "areas.admin_password" in _sql(session)

    @pytest.mark.asyncio
    async def test_unknown_area_raises(self):
        session = _session_returning(None)

        with pytest.raises(AuthenticationError):
            await authenticate_area(session, uuid4(), "f" * 128)


class TestResolveCampaign:
    """Tests for campaign selection."""

    @pytest.mark.asyncio
    async def test_explicit_campaign_scoped_to_area(self):
        campaign_id = uuid4()
        session = _session_returning(campaign_id)

        assert await resolve_campaign(session, uuid4(), campaign_id) == campaign_id
        sql = _sql(session)
        assert "campaigns.area_id" in sql
        assert "campaigns.id" in sql
        assert "campaigns.active" not in sql

    @pytest.mark.asyncio
    async def test_defaults_to_active_campaign(self):
        session = _session_returning(None)

        assert await resolve_campaign(session, uuid4()) is None
        assert "campaigns.active IS true" in _sql(session)


class TestClientIp:
    """Tests for caller address extraction."""

    def test_first_forwarded_hop(self):
        request = SimpleNamespace(
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
            client=SimpleNamespace(host="10.0.0.2"),
        )

        assert get_client_ip(request) == "203.0.113.7"

    def test_peer_address(self):
        request = SimpleNamespace(headers={}, client=SimpleNamespace(host="10.0.0.2"))

        assert get_client_ip(request) == "10.0.0.2"

    def test_unknown(self):
        request = SimpleNamespace(headers={}, client=None)

        assert get_client_ip(request) == "no IP"
