"""RSA key material for signing and verifying access tokens.

The pair is loaded once at startup and never mutated. Only the public half
leaves the process, through the read-only accessors below.
"""

import base64
import logging
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from accountkit.core.config import Settings

logger = logging.getLogger(__name__)

_DEFAULT_KEY_SIZE = 2048
_PUBLIC_EXPONENT = 65537


@dataclass(frozen=True)
class KeyMaterial:
    """Immutable RSA key pair.

    Attributes:
        private_key: Signing half. Never serialized by this module.
        public_key: Verification half.
    """

    private_key: rsa.RSAPrivateKey
    public_key: rsa.RSAPublicKey

    @classmethod
    def from_pem_files(
        cls, private_key_path: str | Path, public_key_path: str | Path
    ) -> "KeyMaterial":
        """Load a PKCS#8 private key and an X.509 public key from PEM files.

        Raises:
            ValueError: If either file is not an RSA key, or the halves
                do not belong to the same pair.
        """
        private_key = serialization.load_pem_private_key(
            Path(private_key_path).read_bytes(), password=None
        )
        public_key = serialization.load_pem_public_key(
            Path(public_key_path).read_bytes()
        )
        if not isinstance(private_key, rsa.RSAPrivateKey) or not isinstance(
            public_key, rsa.RSAPublicKey
        ):
            msg = "Access token keys must be RSA keys"
            raise ValueError(msg)
        if private_key.public_key().public_numbers() != public_key.public_numbers():
            msg = "Access token private and public keys do not form a pair"
            raise ValueError(msg)
        return cls(private_key=private_key, public_key=public_key)

    @classmethod
    def generate(cls, key_size: int = _DEFAULT_KEY_SIZE) -> "KeyMaterial":
        """Create an ephemeral key pair.

        Tokens signed with it stop verifying after a restart, so this is
        for development and tests only.
        """
        private_key = rsa.generate_private_key(
            public_exponent=_PUBLIC_EXPONENT, key_size=key_size
        )
        return cls(private_key=private_key, public_key=private_key.public_key())

    @property
    def public_key_pem(self) -> str:
        """Public key as SubjectPublicKeyInfo PEM text."""
        return self.public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ).decode()

    @property
    def public_key_der_base64(self) -> str:
        """Public key as base64 of its SubjectPublicKeyInfo DER encoding.

        This is the form handed to parties verifying tokens independently.
        """
        der = self.public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return base64.b64encode(der).decode()


def load_key_material(settings: Settings) -> KeyMaterial:
    """Build the process-wide key material from settings.

    Loads the configured PEM files when both paths are set. Otherwise
    generates an ephemeral pair, which production refuses.

    Raises:
        ValueError: If no key paths are configured in production.
    """
    if settings.jwt_private_key_path and settings.jwt_public_key_path:
        return KeyMaterial.from_pem_files(
            settings.jwt_private_key_path, settings.jwt_public_key_path
        )

    if settings.environment == "production":
        msg = "Refusing to generate ephemeral signing keys in production"
        raise ValueError(msg)

    logger.warning(
        "No JWT key paths configured; generating an ephemeral key pair. "
        "Access tokens will not survive a restart."
    )
    return KeyMaterial.generate()
