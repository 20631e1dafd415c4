"""Tests for model helpers and the UTC timestamp column."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from ulid import ULID

from accountkit.models import (
    Account,
    CertificationToken,
    RefreshToken,
    generate_account_id,
    generate_token_value,
)
from accountkit.repositories.account_repository import AccountRepository

_NOW = datetime(2026, 1, 1, tzinfo=UTC)


class TestGenerators:
    def test_account_ids_are_ulids(self):
        first = generate_account_id()
        second = generate_account_id()
        assert len(first) == 26
        assert first != second
        assert ULID.from_str(first).timestamp <= ULID.from_str(second).timestamp

    def test_token_values_are_random_and_url_safe(self):
        values = {generate_token_value() for _ in range(50)}
        assert len(values) == 50
        assert all(len(v) == 43 and "+" not in v and "/" not in v for v in values)


class TestExpiry:
    def test_certification_token_live_until_expire_at(self):
        token = CertificationToken(account_id="a", token="t", expire_at=_NOW)
        assert not token.is_expired(_NOW)
        assert token.is_expired(_NOW + timedelta(microseconds=1))

    def test_refresh_token_live_until_expire_at(self):
        token = RefreshToken(token="t", account_id="a", expire_at=_NOW)
        assert not token.is_expired(_NOW)
        assert token.is_expired(_NOW + timedelta(seconds=1))


class TestUTCDateTime:
    async def test_round_trips_as_aware_utc(
        self, session_factory: async_sessionmaker[AsyncSession]
    ):
        repo = AccountRepository(session_factory)
        account_id = generate_account_id()
        await repo.insert(
            Account(
                id=account_id,
                email="tz@example.com",
                screen_name="tz",
                password_digest="x",
                signed_up_at=_NOW,
            )
        )

        stored = await repo.find_by_id(account_id)

        assert stored.signed_up_at == _NOW
        assert stored.signed_up_at.tzinfo is not None

    async def test_rejects_naive_datetimes(
        self, session_factory: async_sessionmaker[AsyncSession]
    ):
        repo = AccountRepository(session_factory)
        with pytest.raises(Exception, match="Naive datetimes"):
            await repo.insert(
                Account(
                    id=generate_account_id(),
                    email="naive@example.com",
                    screen_name="naive",
                    password_digest="x",
                    signed_up_at=datetime(2026, 1, 1),
                )
            )
