"""Verification emails through a transactional email provider.

Sending never fails the caller: without provider credentials, or when the
provider is unreachable or rejects the request, the verification link is
logged instead so an operator can pass it on.
"""

import logging

import httpx

from yume.config import Settings, settings
from yume.core.errors import EmailDeliveryError, handle_errors

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Verify your {site_name} account"

VERIFICATION_HTML = """\
<p>Hi {username},</p>
<p>Thanks for signing up to {site_name}. Confirm your email address to activate your account:</p>
<p><a href="{link}">{link}</a></p>
<p>The link expires in {ttl_hours} hours. If you did not sign up, ignore this message.</p>
"""


class VerificationMailer:
    """Sends account verification links."""

    def __init__(self, config: Settings = settings, client: httpx.AsyncClient | None = None):
        self._config = config
        self._client = client or httpx.AsyncClient(timeout=15.0)
        self._owns_client = client is None

    @property
    def configured(self) -> bool:
        """True when every provider credential is present."""
        return all(
            (
                self._config.email_service_id,
                self._config.email_template_id,
                self._config.email_public_key,
            )
        )

    def verification_link(self, token: str) -> str:
        return f"{self._config.public_origin.rstrip('/')}/#/verify-email/{token}"

    async def send_verification(
        self, email: str, username: str, token: str, site_name: str = "Yume TV"
    ) -> bool:
        """Email the verification link to ``email``.

        Returns:
            True when the provider accepted the message, False when the link
            was logged instead.
        """
        link = self.verification_link(token)
        if not self.configured:
            logger.warning(f"Email provider not configured; verification link for {email}: {link}")
            return False

        subject = VERIFICATION_SUBJECT.format(site_name=site_name)
        html = VERIFICATION_HTML.format(
            username=username,
            site_name=site_name,
            link=link,
            ttl_hours=self._config.verification_token_ttl_hours,
        )
        try:
            await self._post(email, username, subject, html, link)
        except EmailDeliveryError:
            logger.warning(f"Verification email to {email} not sent; link: {link}")
            return False

        logger.info(f"Verification email sent to {email}")
        return True

    @handle_errors(
        error_types=(httpx.HTTPError,),
        default_message="Email provider request failed",
        log_level="warning",
        wrap_as=EmailDeliveryError,
    )
    async def _post(self, email: str, username: str, subject: str, html: str, link: str) -> None:
        payload = {
            "service_id": self._config.email_service_id,
            "template_id": self._config.email_template_id,
            "user_id": self._config.email_public_key,
            "template_params": {
                "to_email": email,
                "to_name": username,
                "subject": subject,
                "html": html,
                "verification_link": link,
            },
        }
        response = await self._client.post(self._config.email_api_url, json=payload)
        response.raise_for_status()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
