"""Access token codec.

Signs and verifies the bearer access token (RS256). The codec is stateless:
verification uses only the public key and the configured issuer, and never
consults storage.

Claims:
- iss: configured issuer
- sub: account id
- nbf, iat: issue time
- exp: issue time + access token TTL
- rft: the refresh token value current at issue time
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt

from accountkit.core.clock import Clock
from accountkit.core.keys import KeyMaterial
from accountkit.core.results import Ok

ALGORITHM = "RS256"
REFRESH_TOKEN_CLAIM = "rft"

_REQUIRED_CLAIMS = ["iss", "sub", "nbf", "iat", "exp", REFRESH_TOKEN_CLAIM]


class TokenRejection(str, Enum):
    """Why an access token failed verification.

    Values:
        EXPIRED: Signature and issuer are fine but exp has passed.
        INVALID: Anything else (signature, issuer, format, claims, nbf).
    """

    EXPIRED = "expired"
    INVALID = "invalid"


@dataclass(frozen=True)
class TokenRejected:
    """Verification failure result."""

    reason: TokenRejection


@dataclass(frozen=True)
class AccessTokenClaims:
    """Verified contents of an access token."""

    account_id: str
    refresh_token: str
    issued_at: datetime
    expires_at: datetime


class AccessTokenCodec:
    """Mint and verify signed access tokens.

    Args:
        key_material: RSA key pair; the private half signs.
        issuer: Value of the iss claim, required on verification.
        ttl: Access token lifetime. Much shorter than refresh token TTL.
        clock: Time source for issuance.
    """

    def __init__(
        self,
        key_material: KeyMaterial,
        *,
        issuer: str,
        ttl: timedelta,
        clock: Clock,
    ) -> None:
        self._keys = key_material
        self._issuer = issuer
        self._ttl = ttl
        self._clock = clock

    def issue(self, account_id: str, refresh_token: str) -> str:
        """Create a signed access token.

        Args:
            account_id: Subject of the token.
            refresh_token: Refresh token value carried in the rft claim.

        Returns:
            Encoded JWT string.
        """
        # PyJWT encodes datetimes as whole seconds
        now = self._clock.now().replace(microsecond=0)
        payload = {
            "iss": self._issuer,
            "sub": account_id,
            "nbf": now,
            "iat": now,
            "exp": now + self._ttl,
            REFRESH_TOKEN_CLAIM: refresh_token,
        }
        return jwt.encode(payload, self._keys.private_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> Ok[AccessTokenClaims] | TokenRejected:
        """Check signature, issuer and validity window.

        Args:
            token: Encoded JWT string.

        Returns:
            Ok with the verified claims, or TokenRejected with the reason.
        """
        try:
            payload = jwt.decode(
                token,
                self._keys.public_key,
                algorithms=[ALGORITHM],
                issuer=self._issuer,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            return TokenRejected(TokenRejection.EXPIRED)
        except jwt.InvalidTokenError:
            return TokenRejected(TokenRejection.INVALID)

        return Ok(
            AccessTokenClaims(
                account_id=payload["sub"],
                refresh_token=payload[REFRESH_TOKEN_CLAIM],
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        )
