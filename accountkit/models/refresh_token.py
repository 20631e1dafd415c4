"""Refresh token model - one row per active session.

Rows are never updated: rotation deletes the old row and inserts a new one,
so a retired value can never be found again.
"""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from accountkit.models.base import Base


class RefreshToken(Base):
    """Long-lived, single-use refresh token.

    Attributes:
        token: Random token value. Primary key.
        account_id: Owning account (many tokens per account).
        expire_at: Expiry timestamp.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    account_id: Mapped[str] = mapped_column(
        String(26),
        nullable=False,
        index=True,
    )
    expire_at: Mapped[datetime] = mapped_column(
        nullable=False,
    )

    def is_expired(self, now: datetime) -> bool:
        return now > self.expire_at
