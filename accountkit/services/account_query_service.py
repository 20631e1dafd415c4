"""Read-only account lookups for authenticated callers."""

from dataclasses import dataclass

from accountkit.core.results import Failure, Ok, guard_storage
from accountkit.repositories.account_repository import AccountRepository


@dataclass(frozen=True)
class AccountProfile:
    """Public fields of an account. Never includes email or digest."""

    id: str
    screen_name: str


class AccountQueryService:
    def __init__(self, accounts: AccountRepository) -> None:
        self._accounts = accounts

    @guard_storage
    async def get_account(self, account_id: str) -> Ok[AccountProfile] | Failure:
        """Look up a certificated account's public profile.

        Pending accounts are reported as not found.

        Returns:
            Ok with the profile, or NOT_FOUND.
        """
        account = await self._accounts.find_by_id(account_id, certificated=True)
        if account is None:
            return Failure.not_found("account", "not found")
        return Ok(AccountProfile(id=account.id, screen_name=account.screen_name))
