"""Application configuration loaded from environment variables.

Settings for the database, token lifetimes, key material and the email
collaborator. Uses pydantic-settings for validation and .env file support.
"""

from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure default password that must not be used in production
# Security: Runtime check in check_production_security() prevents use in production
_INSECURE_DEFAULT_PASSWORD = "accountkit_dev_password"  # nosec B105


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "accountkit"
    database_user: str = "accountkit_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD

    # Application
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Access tokens (RS256). Empty key paths mean "generate an ephemeral pair",
    # which is only allowed outside production.
    jwt_issuer: str = "accountkit"
    jwt_private_key_path: str = ""
    jwt_public_key_path: str = ""
    access_token_ttl_seconds: int = 900

    # Refresh and certification tokens
    refresh_token_ttl_days: int = 30
    certification_token_ttl_seconds: int = 86400

    # Email
    email_from: str = "noreply@accountkit.local"
    resend_api_key: SecretStr = SecretStr("")
    certification_link_base: str = "http://localhost:3000/account/certification"

    @property
    def database_url(self) -> str:
        """Async database URL for SQLAlchemy."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Validate token lifetimes and production security requirements.

        Checks:
        - Every token TTL must be positive (all environments)
        - Access tokens must expire before refresh tokens (all environments)
        - Database password must not be the default in production
        - Key paths and the email API key must be set in production
        """
        for name in (
            "access_token_ttl_seconds",
            "refresh_token_ttl_days",
            "certification_token_ttl_seconds",
        ):
            value = getattr(self, name)
            if value <= 0:
                msg = f"{name.upper()} must be positive. Got: {value}"
                raise ValueError(msg)

        if self.access_token_ttl_seconds >= self.refresh_token_ttl_days * 86400:
            msg = (
                "ACCESS_TOKEN_TTL_SECONDS must be shorter than the refresh token "
                "lifetime (REFRESH_TOKEN_TTL_DAYS)."
            )
            raise ValueError(msg)

        if self.environment == "production":
            if self.database_password == _INSECURE_DEFAULT_PASSWORD:
                msg = (
                    "Cannot use default database password in production. "
                    "Set DATABASE_PASSWORD environment variable to a secure value."
                )
                raise ValueError(msg)

            if not self.jwt_private_key_path or not self.jwt_public_key_path:
                msg = (
                    "JWT_PRIVATE_KEY_PATH and JWT_PUBLIC_KEY_PATH must be set in "
                    "production. Generate with: openssl genpkey -algorithm RSA "
                    "-pkeyopt rsa_keygen_bits:2048 -out private_key.pem"
                )
                raise ValueError(msg)

            if not self.resend_api_key.get_secret_value():
                msg = "RESEND_API_KEY must be set in production."
                raise ValueError(msg)

        return self


settings = Settings()
