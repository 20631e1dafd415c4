"""SQLAlchemy ORM models for accountkit.

All models are exported from this module for convenient imports:
    from accountkit.models import Account, CertificationToken, RefreshToken

- account.py: Account
- certification_token.py: CertificationToken (one per account)
- refresh_token.py: RefreshToken (many per account)
"""

import secrets

from accountkit.models.account import Account, generate_account_id
from accountkit.models.base import Base, UTCDateTime
from accountkit.models.certification_token import CertificationToken
from accountkit.models.refresh_token import RefreshToken


def generate_token_value() -> str:
    """Opaque random value for certification and refresh tokens."""
    return secrets.token_urlsafe(32)


__all__ = [
    "Account",
    "Base",
    "CertificationToken",
    "RefreshToken",
    "UTCDateTime",
    "generate_account_id",
    "generate_token_value",
]
