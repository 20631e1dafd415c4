"""Refresh token rotation.

A refresh token is single use: presenting it retires it and yields a
successor plus a new access token. Retirement is a conditional delete, so of
two concurrent refreshes with the same token exactly one wins.
"""

import logging
from datetime import timedelta

from accountkit.core.clock import Clock
from accountkit.core.results import Failure, Ok, guard_storage
from accountkit.core.tokens import AccessTokenCodec
from accountkit.models import RefreshToken, generate_token_value
from accountkit.repositories.refresh_token_repository import (
    RefreshTokenRepository,
)
from accountkit.services.authentication_service import IssuedAccessToken

logger = logging.getLogger(__name__)


def _invalid_token() -> Failure:
    return Failure.conflict("token", "invalid")


class TokenRotationService:
    """Rotates refresh tokens.

    Args:
        refresh_tokens: Refresh token storage.
        codec: Access token codec.
        clock: Time source.
        refresh_ttl: Lifetime of the successor token.
    """

    def __init__(
        self,
        refresh_tokens: RefreshTokenRepository,
        *,
        codec: AccessTokenCodec,
        clock: Clock,
        refresh_ttl: timedelta,
    ) -> None:
        self._refresh_tokens = refresh_tokens
        self._codec = codec
        self._clock = clock
        self._refresh_ttl = refresh_ttl

    @guard_storage
    async def refresh(self, token: str) -> Ok[IssuedAccessToken] | Failure:
        """Exchange a refresh token for a successor and a new access token.

        Args:
            token: Refresh token value.

        Returns:
            Ok with the new access token, or CONFLICT if the token is unknown,
            expired, or was retired by a concurrent caller.
        """
        current = await self._refresh_tokens.find_by_token(token)
        if current is None:
            return _invalid_token()

        now = self._clock.now()
        if current.is_expired(now):
            await self._refresh_tokens.delete_by_token(current.token)
            logger.info("Discarded expired refresh token for account %s", current.account_id)
            return _invalid_token()

        successor = RefreshToken(
            token=generate_token_value(),
            account_id=current.account_id,
            expire_at=now + self._refresh_ttl,
        )
        access_token = self._codec.issue(current.account_id, successor.token)

        if not await self._refresh_tokens.delete_by_token(current.token):
            logger.warning(
                "Refresh token for account %s was already rotated", current.account_id
            )
            return _invalid_token()

        await self._refresh_tokens.insert(successor)
        return Ok(IssuedAccessToken(access_token=access_token))
