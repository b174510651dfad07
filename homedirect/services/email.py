"""
Outgoing email for account verification.
Delivers through the Mailgun HTTP API when it is configured and writes the
message to the log otherwise.
"""

from dataclasses import dataclass
from typing import Optional
from homedirect.config import settings
from homedirect.models.user import User
import httpx
import logging

logger = logging.getLogger(__name__)


@dataclass
class EmailMessage:
    """Rendered email ready for delivery."""
    to: str
    subject: str
    text: str


def render_verification_email(user: User, code: str) -> EmailMessage:
    """Build the verification message for a user."""
    ttl = settings.verification_code_ttl_minutes
    text = (
        f"Hello {user.first_name},\n\n"
        f"Thank you for registering with {settings.app_name}!\n\n"
        f"Your verification code is: {code}\n\n"
        f"Please use this code to verify your email address.\n"
        f"This code will expire in {ttl} minutes.\n\n"
        f"If you did not create an account, please ignore this email.\n\n"
        f"Best regards,\n"
        f"The {settings.app_name} Team\n"
    )
    return EmailMessage(
        to=user.email,
        subject=f"Verify your email for {settings.app_name}",
        text=text
    )


class EmailService:
    """
    Sends transactional email.

    Delivery problems are logged and reported through the return value;
    they never propagate to the caller.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        self._http_client = http_client
        self.timeout = timeout

    async def send_verification_email(self, user: User, code: str) -> bool:
        """
        Send a verification code to the user's email address.

        Returns:
            True if the message was handed over for delivery
        """
        message = render_verification_email(user, code)
        return await self.send(message)

    async def send(self, message: EmailMessage) -> bool:
        if not settings.mailgun_enabled:
            logger.info(
                f"Mail delivery not configured, logging message\n"
                f"To: {message.to}\nSubject: {message.subject}\n\n{message.text}"
            )
            return True

        return await self._send_mailgun(message)

    async def _send_mailgun(self, message: EmailMessage) -> bool:
        base = settings.mailgun_base_url.strip().rstrip("/")
        url = f"{base}/v3/{settings.mailgun_domain}/messages"
        data = {
            "from": settings.mail_from,
            "to": message.to,
            "subject": message.subject,
            "text": message.text,
        }

        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    url, auth=("api", settings.mailgun_api_key), data=data
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        url, auth=("api", settings.mailgun_api_key), data=data
                    )
        except httpx.HTTPError as e:
            logger.error(f"Mailgun request failed for {message.to}: {type(e).__name__}: {e}")
            return False

        if response.is_success:
            logger.info(f"Mailgun accepted message to {message.to} (status {response.status_code})")
            return True

        logger.error(
            f"Mailgun rejected message to {message.to}: "
            f"status={response.status_code} body={response.text[:500]}"
        )
        return False
