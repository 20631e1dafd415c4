"""Shared fixtures.

Storage runs against a throwaway file-backed SQLite database per test
(aiosqlite), so no PostgreSQL server is needed. Services are wired exactly
as in production, with a controllable clock and a recording mailer.
"""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from accountkit.core.config import Settings
from accountkit.core.database import create_session_factory
from accountkit.core.email import EmailDeliveryError
from accountkit.core.keys import KeyMaterial
from accountkit.core.passwords import BcryptPasswordHasher
from accountkit.main import create_app
from accountkit.models import Base
from accountkit.services.registry import Services, build_services

TEST_EMAIL = "alice@example.com"
TEST_SCREEN_NAME = "alice"
# Satisfies every password rule: length, ASCII, uppercase, symbol
TEST_PASSWORD = "Secret!pass1"  # nosec B105


class FrozenClock:
    """Clock that only moves when told to.

    Starts at the real current time because PyJWT checks exp/nbf against
    the wall clock on verification.
    """

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime.now(UTC)

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> None:
        self._now += delta


@dataclass
class SentEmail:
    recipient: str
    screen_name: str
    certification_link: str

    @property
    def token(self) -> str:
        """Certification token carried in the link."""
        return parse_qs(urlparse(self.certification_link).query)["token"][0]


class RecordingMailer:
    """CertificationMailer fake that records messages and can be made to fail."""

    def __init__(self) -> None:
        self.sent: list[SentEmail] = []
        self.fail = False

    async def send_certification_email(
        self, *, recipient: str, screen_name: str, certification_link: str
    ) -> None:
        if self.fail:
            raise EmailDeliveryError("mail relay unavailable")
        self.sent.append(SentEmail(recipient, screen_name, certification_link))

    @property
    def last(self) -> SentEmail:
        return self.sent[-1]


@pytest.fixture(scope="session")
def key_material() -> KeyMaterial:
    """One RSA pair for the whole run; generation is slow."""
    return KeyMaterial.generate()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="development",
        jwt_issuer="accountkit-test",
        certification_link_base="https://app.example.com/certify",
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    """Minimum bcrypt cost keeps the suite fast."""
    return BcryptPasswordHasher(rounds=4)


@pytest_asyncio.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'accountkit.db'}", echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest.fixture
def services(
    session_factory: async_sessionmaker[AsyncSession],
    test_settings: Settings,
    key_material: KeyMaterial,
    mailer: RecordingMailer,
    hasher: BcryptPasswordHasher,
    clock: FrozenClock,
) -> Services:
    return build_services(
        session_factory,
        settings=test_settings,
        key_material=key_material,
        mailer=mailer,
        hasher=hasher,
        clock=clock,
    )


@pytest_asyncio.fixture
async def client(services: Services) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to an app using the test services."""
    app = create_app(services)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def pending_account_id(services: Services) -> str:
    """Registered but not yet certificated account."""
    result = await services.registration.register(
        TEST_EMAIL, TEST_SCREEN_NAME, TEST_PASSWORD
    )
    return result.value.id


@pytest_asyncio.fixture
async def certificated_account_id(
    services: Services, mailer: RecordingMailer, pending_account_id: str
) -> str:
    """Registered account whose certification link has been redeemed."""
    await services.certification.redeem(mailer.last.token)
    return pending_account_id
