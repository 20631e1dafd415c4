"""Certification email dispatch.

Simple HTTP POST to Resend with a plain-text body. The services only know
the CertificationMailer protocol; delivery failures surface as
EmailDeliveryError so the caller can abort before persisting anything.
"""

import logging
from typing import Protocol
from urllib.parse import quote, urlencode

import httpx

from accountkit.core.config import Settings

logger = logging.getLogger(__name__)

_RESEND_API_URL = "https://api.resend.com/emails"
_RESEND_TIMEOUT = 10.0

_CERTIFICATION_SUBJECT = "Complete your registration"


class EmailDeliveryError(Exception):
    """The email collaborator could not accept the message."""


class CertificationMailer(Protocol):
    """Sends the link that certifies control of an email address."""

    async def send_certification_email(
        self, *, recipient: str, screen_name: str, certification_link: str
    ) -> None: ...


def build_certification_link(base_url: str, token: str) -> str:
    """Append the raw certification token to the UI certification URL.

    Args:
        base_url: Page that will redeem the token.
        token: Plain certification token value.

    Returns:
        Absolute URL with the token as the ``token`` query parameter.
    """
    params = urlencode({"token": token}, quote_via=quote)
    return f"{base_url}?{params}"


def render_certification_text(screen_name: str, certification_link: str) -> str:
    return (
        f"Hello {screen_name},\n\n"
        "Open this link to complete your registration:\n\n"
        f"{certification_link}\n\n"
        "If you didn't sign up, you can safely ignore this email."
    )


class ResendCertificationMailer:
    """Deliver certification emails through the Resend HTTP API.

    Args:
        api_key: Resend API key.
        sender: From address.
        transport: Optional httpx transport, for tests.
    """

    def __init__(
        self,
        *,
        api_key: str,
        sender: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._sender = sender
        self._transport = transport

    async def send_certification_email(
        self, *, recipient: str, screen_name: str, certification_link: str
    ) -> None:
        """Send the certification link.

        Raises:
            EmailDeliveryError: If the request fails or Resend rejects it.
        """
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(
                    _RESEND_API_URL,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json={
                        "from": self._sender,
                        "to": recipient,
                        "subject": _CERTIFICATION_SUBJECT,
                        "text": render_certification_text(
                            screen_name, certification_link
                        ),
                    },
                    timeout=_RESEND_TIMEOUT,
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise EmailDeliveryError("Certification email was not accepted") from exc


class LoggingCertificationMailer:
    """Log certification links instead of sending them.

    Local development only: used when no Resend API key is configured.
    """

    async def send_certification_email(
        self, *, recipient: str, screen_name: str, certification_link: str
    ) -> None:
        logger.info(
            "Certification email for %s (%s): %s",
            recipient,
            screen_name,
            certification_link,
        )


def create_certification_mailer(settings: Settings) -> CertificationMailer:
    """Pick the mailer for the configured environment.

    Without a Resend API key the links are only logged. Production settings
    refuse to load without a key, so that fallback never ships.
    """
    api_key = settings.resend_api_key.get_secret_value()
    if api_key:
        return ResendCertificationMailer(api_key=api_key, sender=settings.email_from)
    logger.warning("RESEND_API_KEY not set; certification links will be logged")
    return LoggingCertificationMailer()
