"""Repository for Account storage operations.

Each method runs in its own short transaction opened from the session
factory, so every call is an independent, committed storage operation.
"""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from accountkit.models.account import Account
from accountkit.models.certification_token import CertificationToken


class AccountRepository:
    """Storage operations for the accounts table.

    Args:
        sessions: Session factory shared by all repositories.
    """

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def insert(self, account: Account) -> None:
        """Store a new account.

        Raises:
            sqlalchemy.exc.IntegrityError: If the id or email already exists.
        """
        async with self._sessions.begin() as db:
            db.add(account)

    async def insert_with_certification_token(
        self, account: Account, certification_token: CertificationToken
    ) -> None:
        """Store a new pending account together with its certification token.

        Both rows commit in one transaction, so no reader ever sees the
        account without its token.

        Raises:
            sqlalchemy.exc.IntegrityError: If the id or email already exists.
                Neither row is stored.
        """
        async with self._sessions.begin() as db:
            db.add(account)
            db.add(certification_token)

    async def find_by_id(
        self, account_id: str, *, certificated: bool | None = None
    ) -> Account | None:
        """Fetch an account by id.

        Args:
            account_id: Account id.
            certificated: When set, only match accounts in that state.

        Returns:
            Account if found, None otherwise.
        """
        stmt = select(Account).where(Account.id == account_id)
        if certificated is not None:
            stmt = stmt.where(Account.is_certificated == certificated)
        async with self._sessions.begin() as db:
            result = await db.execute(stmt)
            return result.scalar_one_or_none()

    async def find_by_email(
        self, email: str, *, certificated: bool | None = None
    ) -> Account | None:
        """Fetch an account by exact email.

        Args:
            email: Email address as stored.
            certificated: When set, only match accounts in that state.

        Returns:
            Account if found, None otherwise.
        """
        stmt = select(Account).where(Account.email == email)
        if certificated is not None:
            stmt = stmt.where(Account.is_certificated == certificated)
        async with self._sessions.begin() as db:
            result = await db.execute(stmt)
            return result.scalar_one_or_none()

    async def mark_certificated(self, account_id: str) -> bool:
        """Set is_certificated on an account.

        Returns:
            True if the account exists, False otherwise.
        """
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(is_certificated=True)
        )
        async with self._sessions.begin() as db:
            result = await db.execute(stmt)
            return result.rowcount == 1  # type: ignore[attr-defined]

    async def delete(
        self, account_id: str, *, only_uncertificated: bool = False
    ) -> bool:
        """Delete an account.

        Args:
            account_id: Account id.
            only_uncertificated: Leave certificated accounts untouched. Guards
                against a certification that landed after the caller looked.

        Returns:
            True if a row was deleted.
        """
        stmt = delete(Account).where(Account.id == account_id)
        if only_uncertificated:
            stmt = stmt.where(Account.is_certificated.is_(False))
        async with self._sessions.begin() as db:
            result = await db.execute(stmt)
            return result.rowcount == 1  # type: ignore[attr-defined]
