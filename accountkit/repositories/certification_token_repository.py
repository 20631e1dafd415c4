"""Repository for CertificationToken storage operations.

One row per account. Redemption uses a single DELETE ... RETURNING so only
one concurrent caller can observe a given token.
"""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from accountkit.models.certification_token import CertificationToken


class CertificationTokenRepository:
    """Storage operations for the certification_tokens table.

    Args:
        sessions: Session factory shared by all repositories.
    """

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def insert(self, certification_token: CertificationToken) -> None:
        """Store a new token.

        Raises:
            sqlalchemy.exc.IntegrityError: If the account already has a token
                or the value collides.
        """
        async with self._sessions.begin() as db:
            db.add(certification_token)

    async def find_by_account_id(self, account_id: str) -> CertificationToken | None:
        stmt = select(CertificationToken).where(
            CertificationToken.account_id == account_id
        )
        async with self._sessions.begin() as db:
            result = await db.execute(stmt)
            return result.scalar_one_or_none()

    async def find_and_delete(self, token: str) -> CertificationToken | None:
        """Atomically remove a token by value and return what was removed.

        Args:
            token: Plain token value from the certification link.

        Returns:
            The deleted token, or None if no row matched.
        """
        stmt = (
            delete(CertificationToken)
            .where(CertificationToken.token == token)
            .returning(CertificationToken)
        )
        async with self._sessions.begin() as db:
            result = await db.execute(stmt)
            return result.scalar_one_or_none()

    async def replace(
        self, account_id: str, *, token: str, expire_at: datetime
    ) -> CertificationToken | None:
        """Rotate the account's token value and expiry in place.

        Args:
            account_id: Owning account.
            token: New token value.
            expire_at: New expiry.

        Returns:
            The updated token, or None if the account has no token row.
        """
        stmt = (
            update(CertificationToken)
            .where(CertificationToken.account_id == account_id)
            .values(token=token, expire_at=expire_at)
            .returning(CertificationToken)
        )
        async with self._sessions.begin() as db:
            result = await db.execute(stmt)
            return result.scalar_one_or_none()

    async def delete_by_account_id(self, account_id: str) -> bool:
        """Remove the account's token, if any.

        Returns:
            True if a row was deleted.
        """
        stmt = delete(CertificationToken).where(
            CertificationToken.account_id == account_id
        )
        async with self._sessions.begin() as db:
            result = await db.execute(stmt)
            return result.rowcount == 1  # type: ignore[attr-defined]
