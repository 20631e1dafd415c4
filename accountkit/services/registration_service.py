"""Account registration.

Creates a pending account and its certification token, and asks the mailer
to deliver the certification link. Abandoned signups (token missing or
expired) are cleared inline so the same email can register again.

Ordering:
1. Validate input
2. Resolve any existing account for the email
3. Build account + token
4. Send the certification email (nothing persisted yet)
5. Persist account and token in one transaction
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from accountkit.core.clock import Clock
from accountkit.core.email import (
    CertificationMailer,
    EmailDeliveryError,
    build_certification_link,
)
from accountkit.core.passwords import PasswordHasher
from accountkit.core.results import Failure, Ok, guard_storage
from accountkit.models import (
    Account,
    CertificationToken,
    generate_account_id,
    generate_token_value,
)
from accountkit.repositories.account_repository import AccountRepository
from accountkit.repositories.certification_token_repository import (
    CertificationTokenRepository,
)
from accountkit.services.validation import REGISTRATION_RULES, validate_fields

logger = logging.getLogger(__name__)

_ALREADY_REGISTERED = "already registered"


@dataclass(frozen=True)
class RegisteredAccount:
    """Public view of a newly registered account."""

    id: str
    screen_name: str


class RegistrationService:
    """Registers accounts pending email certification.

    Args:
        accounts: Account storage.
        certification_tokens: Certification token storage.
        hasher: Password hash capability.
        mailer: Certification email collaborator.
        clock: Time source.
        certification_ttl: Lifetime of a certification token.
        certification_link_base: URL the raw token is appended to.
    """

    def __init__(
        self,
        accounts: AccountRepository,
        certification_tokens: CertificationTokenRepository,
        *,
        hasher: PasswordHasher,
        mailer: CertificationMailer,
        clock: Clock,
        certification_ttl: timedelta,
        certification_link_base: str,
    ) -> None:
        self._accounts = accounts
        self._certification_tokens = certification_tokens
        self._hasher = hasher
        self._mailer = mailer
        self._clock = clock
        self._certification_ttl = certification_ttl
        self._certification_link_base = certification_link_base

    @guard_storage
    async def register(
        self, email: str, screen_name: str, password: str
    ) -> Ok[RegisteredAccount] | Failure:
        """Register a new account and send its certification link.

        Args:
            email: Email address; must not belong to a certificated or
                pending account.
            screen_name: Display name.
            password: Plain-text password.

        Returns:
            Ok with the new account's id and screen name, or a VALIDATION,
            BUSINESS or SYSTEM failure.
        """
        invalid = validate_fields(
            {"email": email, "screenName": screen_name, "password": password},
            REGISTRATION_RULES,
        )
        if invalid is not None:
            return invalid

        blocked = await self._release_abandoned_signup(email)
        if blocked is not None:
            return blocked

        now = self._clock.now()
        account = Account(
            id=generate_account_id(),
            email=email,
            screen_name=screen_name,
            password_digest=self._hasher.hash(password),
            is_certificated=False,
            signed_up_at=now,
        )
        certification_token = CertificationToken(
            account_id=account.id,
            token=generate_token_value(),
            expire_at=now + self._certification_ttl,
        )

        # The account must never exist without an attempt to notify its owner
        try:
            await self._mailer.send_certification_email(
                recipient=account.email,
                screen_name=account.screen_name,
                certification_link=build_certification_link(
                    self._certification_link_base, certification_token.token
                ),
            )
        except EmailDeliveryError:
            logger.exception("Certification email failed for new account %s", account.id)
            return Failure.system()

        try:
            await self._accounts.insert_with_certification_token(
                account, certification_token
            )
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            logger.info("Concurrent registration detected for account %s", account.id)
            return Failure.business("email", _ALREADY_REGISTERED)

        logger.info("Registered account %s", account.id)
        return Ok(RegisteredAccount(id=account.id, screen_name=account.screen_name))

    async def _release_abandoned_signup(self, email: str) -> Failure | None:
        """Block on live registrations, clear abandoned ones.

        Returns:
            BUSINESS failure if the email is certificated or pending with a
            live token; None once the email is free to register.
        """
        existing = await self._accounts.find_by_email(email)
        if existing is None:
            return None
        if existing.is_certificated:
            return Failure.business("email", _ALREADY_REGISTERED)

        pending = await self._certification_tokens.find_by_account_id(existing.id)
        if pending is not None and not pending.is_expired(self._clock.now()):
            return Failure.business("email", _ALREADY_REGISTERED)

        if pending is not None:
            await self._certification_tokens.delete_by_account_id(existing.id)
        if await self._accounts.delete(existing.id, only_uncertificated=True):
            logger.info("Cleared abandoned signup %s", existing.id)
            return None

        # Either certificated since our read, or already cleared by a
        # concurrent caller
        if await self._accounts.find_by_email(email, certificated=True) is not None:
            return Failure.business("email", _ALREADY_REGISTERED)
        return None
