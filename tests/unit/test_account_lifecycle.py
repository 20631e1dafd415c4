"""End-to-end scenarios across registration, certification and login."""

from datetime import timedelta

from accountkit.core.results import Failure, Ok
from accountkit.repositories.account_repository import AccountRepository
from accountkit.repositories.certification_token_repository import (
    CertificationTokenRepository,
)


async def _storage_state(session_factory, email, account_id):
    account = await AccountRepository(session_factory).find_by_email(email)
    token = await CertificationTokenRepository(session_factory).find_by_account_id(
        account_id
    )
    return (
        account and (account.id, account.is_certificated),
        token and token.token,
    )


class TestRegisterThenRedeem:
    async def test_account_becomes_certificated_with_no_token_left(
        self, services, session_factory, mailer
    ):
        registered = await services.registration.register(
            "a@example.com", "Alice", "Passw0rd!"
        )
        assert await services.certification.redeem(mailer.last.token) == Ok(None)

        assert await _storage_state(
            session_factory, "a@example.com", registered.value.id
        ) == ((registered.value.id, True), None)

    async def test_second_redeem_leaves_state_unchanged(
        self, services, session_factory, mailer
    ):
        registered = await services.registration.register(
            "a@example.com", "Alice", "Passw0rd!"
        )
        token = mailer.last.token
        await services.certification.redeem(token)
        after_first = await _storage_state(
            session_factory, "a@example.com", registered.value.id
        )

        assert await services.certification.redeem(token) == Failure.not_found(
            "token", "invalid"
        )
        assert (
            await _storage_state(session_factory, "a@example.com", registered.value.id)
            == after_first
        )


class TestDoubleRegistration:
    async def test_leaves_one_account_and_one_token(
        self, services, session_factory, mailer
    ):
        first = await services.registration.register(
            "a@example.com", "Alice", "Passw0rd!"
        )
        second = await services.registration.register(
            "a@example.com", "Alice", "Passw0rd!"
        )

        assert second == Failure.business("email", "already registered")
        assert await _storage_state(
            session_factory, "a@example.com", first.value.id
        ) == ((first.value.id, False), mailer.sent[0].token)


class TestResendScenario:
    async def test_resend_invalidates_old_link(self, services, session_factory, mailer):
        registered = await services.registration.register(
            "a@example.com", "Alice", "Passw0rd!"
        )
        old_token = mailer.last.token

        assert await services.certification.replace(registered.value.id) == Ok(None)
        new_token = mailer.last.token
        assert new_token != old_token

        assert await services.certification.redeem(old_token) == Failure.not_found(
            "token", "invalid"
        )
        assert await services.certification.redeem(new_token) == Ok(None)
        account = await AccountRepository(session_factory).find_by_id(
            registered.value.id
        )
        assert account.is_certificated is True


class TestExpiredTokenScenario:
    async def test_expired_token_forces_reregistration(
        self, services, session_factory, mailer, clock
    ):
        registered = await services.registration.register(
            "a@example.com", "Alice", "Passw0rd!"
        )
        # Move the stored expiry into the past
        await CertificationTokenRepository(session_factory).replace(
            registered.value.id,
            token="expired-token",
            expire_at=clock.now() - timedelta(minutes=1),
        )

        result = await services.certification.redeem("expired-token")

        assert result == Failure.not_found("account", "must register again")
        assert await AccountRepository(session_factory).find_by_id(
            registered.value.id
        ) is None
        again = await services.registration.register(
            "a@example.com", "Alice", "Passw0rd!"
        )
        assert isinstance(again, Ok)



class TestLongPasswordScenario:
    """Passwords longer than bcrypt's 72-byte input limit."""

    PASSWORD = "A!" + "a" * 98

    async def test_register_redeem_and_login(self, services, mailer):
        registered = await services.registration.register(
            "a@example.com", "Alice", self.PASSWORD
        )
        assert isinstance(registered, Ok)
        assert await services.certification.redeem(mailer.last.token) == Ok(None)

        result = await services.authentication.login("a@example.com", self.PASSWORD)

        assert isinstance(result, Ok)
        claims = services.codec.verify(result.value.access_token).value
        assert claims.account_id == registered.value.id

    async def test_different_tail_is_rejected(self, services, mailer):
        await services.registration.register("a@example.com", "Alice", self.PASSWORD)
        await services.certification.redeem(mailer.last.token)

        result = await services.authentication.login(
            "a@example.com", self.PASSWORD[:-1] + "b"
        )

        assert isinstance(result, Failure)
