"""Password login.

Exchanges email + password for a new refresh token and an access token that
carries it. Every rejection looks the same to the caller so login cannot be
used to discover which emails are registered.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from accountkit.core.clock import Clock
from accountkit.core.passwords import PasswordHasher
from accountkit.core.results import Failure, Ok, guard_storage
from accountkit.core.tokens import AccessTokenCodec
from accountkit.models import RefreshToken, generate_token_value
from accountkit.repositories.account_repository import AccountRepository
from accountkit.repositories.refresh_token_repository import (
    RefreshTokenRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedAccessToken:
    """Signed access token handed back to the client."""

    access_token: str


def invalid_credentials() -> Failure:
    """The single failure returned for every rejected login."""
    return Failure.business("account", "email or password is incorrect")


class AuthenticationService:
    """Authenticates certificated accounts by password.

    Args:
        accounts: Account storage.
        refresh_tokens: Refresh token storage.
        hasher: Password hash capability.
        codec: Access token codec.
        clock: Time source.
        refresh_ttl: Lifetime of a new refresh token.
    """

    def __init__(
        self,
        accounts: AccountRepository,
        refresh_tokens: RefreshTokenRepository,
        *,
        hasher: PasswordHasher,
        codec: AccessTokenCodec,
        clock: Clock,
        refresh_ttl: timedelta,
    ) -> None:
        self._accounts = accounts
        self._refresh_tokens = refresh_tokens
        self._hasher = hasher
        self._codec = codec
        self._clock = clock
        self._refresh_ttl = refresh_ttl

    @guard_storage
    async def login(self, email: str, password: str) -> Ok[IssuedAccessToken] | Failure:
        """Verify credentials and start a new session.

        Pending (uncertificated) accounts cannot log in and are treated
        exactly like unknown emails.

        Args:
            email: Account email.
            password: Plain-text password.

        Returns:
            Ok with a signed access token, or the generic BUSINESS failure.
        """
        account = await self._accounts.find_by_email(email, certificated=True)
        if account is None:
            self._hasher.verify_dummy(password)
            return invalid_credentials()

        if not self._hasher.verify(password, account.password_digest):
            logger.info("Rejected login for account %s", account.id)
            return invalid_credentials()

        refresh_token = RefreshToken(
            token=generate_token_value(),
            account_id=account.id,
            expire_at=self._clock.now() + self._refresh_ttl,
        )
        access_token = self._codec.issue(account.id, refresh_token.token)
        await self._refresh_tokens.insert(refresh_token)

        logger.info("Account %s logged in", account.id)
        return Ok(IssuedAccessToken(access_token=access_token))
