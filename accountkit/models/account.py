"""Account model - registered identity.

Created on registration, flipped to certificated once, deleted when its
certification window lapses without redemption.
"""

from datetime import datetime

from sqlalchemy import Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column
from ulid import ULID

from accountkit.models.base import Base


def generate_account_id() -> str:
    """New sortable, high-entropy account id (26-char ULID)."""
    return str(ULID())


class Account(Base):
    """Registered account.

    Attributes:
        id: ULID primary key. Doubles as an external reference.
        email: Unique email address, stored as given.
        screen_name: Display name.
        password_digest: Opaque password hash output.
        is_certificated: True once the email address has been confirmed.
        signed_up_at: Registration timestamp.
    """

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(
        String(26),
        primary_key=True,
    )
    # Uniqueness lives in the database so concurrent registrations race on it
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    screen_name: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )
    password_digest: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    is_certificated: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        server_default=text("false"),
        default=False,
    )
    signed_up_at: Mapped[datetime] = mapped_column(
        nullable=False,
    )
