"""Certification token redemption and replacement.

Account lifecycle with respect to certification:
    PENDING (token live)    -- redeem  --> CERTIFICATED (terminal)
    PENDING (token live)    -- replace --> PENDING (new token live)
    PENDING (token expired
             or missing)    -- any read --> DELETED

Expired rows are not swept in the background; they are removed here the
next time something touches them.
"""

import logging
from datetime import timedelta

from accountkit.core.clock import Clock
from accountkit.core.email import (
    CertificationMailer,
    EmailDeliveryError,
    build_certification_link,
)
from accountkit.core.results import Failure, Ok, guard_storage
from accountkit.models import generate_token_value
from accountkit.repositories.account_repository import AccountRepository
from accountkit.repositories.certification_token_repository import (
    CertificationTokenRepository,
)

logger = logging.getLogger(__name__)

_REGISTER_AGAIN = "must register again"


class CertificationService:
    """Redeems and replaces certification tokens.

    Args:
        accounts: Account storage.
        certification_tokens: Certification token storage.
        mailer: Certification email collaborator.
        clock: Time source.
        certification_ttl: Lifetime of a replacement token.
        certification_link_base: URL the raw token is appended to.
    """

    def __init__(
        self,
        accounts: AccountRepository,
        certification_tokens: CertificationTokenRepository,
        *,
        mailer: CertificationMailer,
        clock: Clock,
        certification_ttl: timedelta,
        certification_link_base: str,
    ) -> None:
        self._accounts = accounts
        self._certification_tokens = certification_tokens
        self._mailer = mailer
        self._clock = clock
        self._certification_ttl = certification_ttl
        self._certification_link_base = certification_link_base

    @guard_storage
    async def redeem(self, token: str) -> Ok[None] | Failure:
        """Certificate the account a token belongs to.

        The token is removed in the same storage operation that finds it, so
        of two concurrent redemptions only one sees it.

        Returns:
            Ok(None) on success. NOT_FOUND if the token is unknown or the
            account had to be deleted; CONFLICT if the token expired but the
            account could not be removed (already certificated or gone).
        """
        redeemed = await self._certification_tokens.find_and_delete(token)
        if redeemed is None:
            return Failure.not_found("token", "invalid")

        if redeemed.is_expired(self._clock.now()):
            deleted = await self._accounts.delete(
                redeemed.account_id, only_uncertificated=True
            )
            if deleted:
                logger.info("Deleted account %s with expired token", redeemed.account_id)
                return Failure.not_found("account", _REGISTER_AGAIN)
            return Failure.conflict("token", "expired")

        if not await self._accounts.mark_certificated(redeemed.account_id):
            logger.warning("Redeemed token for missing account %s", redeemed.account_id)
            return Failure.not_found("account", _REGISTER_AGAIN)

        logger.info("Certificated account %s", redeemed.account_id)
        return Ok(None)

    @guard_storage
    async def replace(self, account_id: str) -> Ok[None] | Failure:
        """Rotate an account's certification token and resend the link.

        The old token stops working as soon as storage is updated, even if
        the new email never arrives; the owner can ask again.

        Returns:
            Ok(None) on success. NOT_FOUND for an unknown account or one whose
            token is missing/expired (the account is deleted); CONFLICT if
            already certificated; SYSTEM if the email could not be sent.
        """
        account = await self._accounts.find_by_id(account_id)
        if account is None:
            await self._certification_tokens.delete_by_account_id(account_id)
            return Failure.not_found("accountId", "invalid")

        if account.is_certificated:
            await self._certification_tokens.delete_by_account_id(account.id)
            return Failure.conflict("accountId", "already certificated")

        current = await self._certification_tokens.find_by_account_id(account.id)
        now = self._clock.now()
        if current is None or current.is_expired(now):
            await self._discard_pending(account.id)
            return Failure.not_found("account", _REGISTER_AGAIN)

        replacement = await self._certification_tokens.replace(
            account.id,
            token=generate_token_value(),
            expire_at=now + self._certification_ttl,
        )
        if replacement is None:
            # Token vanished between the read and the update
            await self._discard_pending(account.id)
            return Failure.not_found("account", _REGISTER_AGAIN)

        try:
            await self._mailer.send_certification_email(
                recipient=account.email,
                screen_name=account.screen_name,
                certification_link=build_certification_link(
                    self._certification_link_base, replacement.token
                ),
            )
        except EmailDeliveryError:
            logger.exception("Certification resend failed for account %s", account.id)
            return Failure.system()

        logger.info("Replaced certification token for account %s", account.id)
        return Ok(None)

    async def _discard_pending(self, account_id: str) -> None:
        await self._certification_tokens.delete_by_account_id(account_id)
        await self._accounts.delete(account_id, only_uncertificated=True)
        logger.info("Deleted pending account %s without a live token", account_id)
