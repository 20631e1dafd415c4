"""Request and response bodies for the v1 API.

Fields are camelCase on the wire. These models only check shape and type;
format rules (lengths, password strength) are enforced by the services so
that every rejected field is reported in one response.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterAccountRequest(_CamelModel):
    """Request body for POST /accounts."""

    model_config = ConfigDict(extra="forbid")

    email: str
    screen_name: str
    password: str


class LoginRequest(_CamelModel):
    """Request body for POST /login."""

    model_config = ConfigDict(extra="forbid")

    email: str
    password: str


class AccountResponse(_CamelModel):
    id: str
    screen_name: str


class AccessTokenResponse(_CamelModel):
    access_token: str


class PublicKeyResponse(_CamelModel):
    """Verification key as base64 X.509 SubjectPublicKeyInfo DER."""

    public_key: str
