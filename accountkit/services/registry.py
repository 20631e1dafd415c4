"""Service wiring.

Repositories are built once around the shared session factory and handed to
the services by constructor. The API layer reads the resulting Services
bundle from application state.
"""

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from accountkit.core.clock import Clock
from accountkit.core.config import Settings
from accountkit.core.email import CertificationMailer
from accountkit.core.keys import KeyMaterial
from accountkit.core.passwords import PasswordHasher
from accountkit.core.tokens import AccessTokenCodec
from accountkit.repositories.account_repository import AccountRepository
from accountkit.repositories.certification_token_repository import (
    CertificationTokenRepository,
)
from accountkit.repositories.refresh_token_repository import (
    RefreshTokenRepository,
)
from accountkit.services.account_query_service import AccountQueryService
from accountkit.services.authentication_service import AuthenticationService
from accountkit.services.certification_service import CertificationService
from accountkit.services.registration_service import RegistrationService
from accountkit.services.token_rotation_service import TokenRotationService


@dataclass(frozen=True)
class Services:
    """Everything the HTTP layer needs, constructed once per process."""

    registration: RegistrationService
    certification: CertificationService
    authentication: AuthenticationService
    token_rotation: TokenRotationService
    account_query: AccountQueryService
    codec: AccessTokenCodec
    key_material: KeyMaterial


def build_services(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    settings: Settings,
    key_material: KeyMaterial,
    mailer: CertificationMailer,
    hasher: PasswordHasher,
    clock: Clock,
) -> Services:
    """Construct repositories and services.

    Args:
        session_factory: Session factory every repository opens
            transactions from.
        settings: Validated application settings (TTLs, issuer, link base).
        key_material: RSA key pair for the access token codec.
        mailer: Certification email collaborator.
        hasher: Password hash capability.
        clock: Time source shared by every service.

    Returns:
        Fully wired Services.
    """
    accounts = AccountRepository(session_factory)
    certification_tokens = CertificationTokenRepository(session_factory)
    refresh_tokens = RefreshTokenRepository(session_factory)

    certification_ttl = timedelta(seconds=settings.certification_token_ttl_seconds)
    refresh_ttl = timedelta(days=settings.refresh_token_ttl_days)

    codec = AccessTokenCodec(
        key_material,
        issuer=settings.jwt_issuer,
        ttl=timedelta(seconds=settings.access_token_ttl_seconds),
        clock=clock,
    )

    return Services(
        registration=RegistrationService(
            accounts,
            certification_tokens,
            hasher=hasher,
            mailer=mailer,
            clock=clock,
            certification_ttl=certification_ttl,
            certification_link_base=settings.certification_link_base,
        ),
        certification=CertificationService(
            accounts,
            certification_tokens,
            mailer=mailer,
            clock=clock,
            certification_ttl=certification_ttl,
            certification_link_base=settings.certification_link_base,
        ),
        authentication=AuthenticationService(
            accounts,
            refresh_tokens,
            hasher=hasher,
            codec=codec,
            clock=clock,
            refresh_ttl=refresh_ttl,
        ),
        token_rotation=TokenRotationService(
            refresh_tokens,
            codec=codec,
            clock=clock,
            refresh_ttl=refresh_ttl,
        ),
        account_query=AccountQueryService(accounts),
        codec=codec,
        key_material=key_material,
    )
