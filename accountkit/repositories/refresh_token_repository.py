"""Repository for RefreshToken storage operations.

Rows are inserted and deleted, never updated. A delete that affects zero
rows means another caller already retired the token.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from accountkit.models.refresh_token import RefreshToken


class RefreshTokenRepository:
    """Storage operations for the refresh_tokens table.

    Args:
        sessions: Session factory shared by all repositories.
    """

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def insert(self, refresh_token: RefreshToken) -> None:
        async with self._sessions.begin() as db:
            db.add(refresh_token)

    async def find_by_token(self, token: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        async with self._sessions.begin() as db:
            result = await db.execute(stmt)
            return result.scalar_one_or_none()

    async def delete_by_token(self, token: str) -> bool:
        """Retire a refresh token.

        Returns:
            True if this call deleted the row, False if it was already gone.
        """
        stmt = delete(RefreshToken).where(RefreshToken.token == token)
        async with self._sessions.begin() as db:
            result = await db.execute(stmt)
            return result.rowcount == 1  # type: ignore[attr-defined]

    async def list_by_account_id(self, account_id: str) -> list[RefreshToken]:
        """All stored refresh tokens for an account, expired ones included."""
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.account_id == account_id)
            .order_by(RefreshToken.expire_at)
        )
        async with self._sessions.begin() as db:
            result = await db.execute(stmt)
            return list(result.scalars().all())
