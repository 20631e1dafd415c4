"""Certification token model - proof of email control.

At most one row per account. Not linked to accounts by foreign key; the
certification service cascades deletes itself when it finds stale rows.
"""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from accountkit.models.base import Base


class CertificationToken(Base):
    """Single-use certification token.

    Attributes:
        account_id: Owning account. Primary key: one live token per account.
        token: Random token value sent in the certification link.
        expire_at: Expiry timestamp.
    """

    __tablename__ = "certification_tokens"

    account_id: Mapped[str] = mapped_column(
        String(26),
        primary_key=True,
    )
    token: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
    )
    expire_at: Mapped[datetime] = mapped_column(
        nullable=False,
    )

    def is_expired(self, now: datetime) -> bool:
        return self.expire_at < now
