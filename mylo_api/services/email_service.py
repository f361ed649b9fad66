"""
SendGrid Email Service
Delivers one-time sign-in codes
"""

from typing import Optional, Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To

from mylo_api.errors import EmailDispatchError
from mylo_api.services.structured_logging import get_logger, hash_email

logger = get_logger('mylo.email')

DEFAULT_FROM_ADDRESS = 'no-reply@example.com'
SIGNIN_SUBJECT = 'Your Sign-In Code'


class CodeSender(Protocol):
    """Capability used by the sign-in flow to deliver a code."""

    def send_code(self, to_email: str, code: str) -> None:
        ...


class SendGridCodeMailer:
    """Sends sign-in codes through the SendGrid v3 API. No retries."""

    def __init__(self, api_key: Optional[str], from_address: Optional[str] = None,
                 from_name: str = 'myLocal', client: Optional[SendGridAPIClient] = None):
        self.api_key = api_key
        if not from_address:
            logger.warning("SENDGRID_FROM_ADDRESS not set, using fallback",
                           from_address=DEFAULT_FROM_ADDRESS)
            from_address = DEFAULT_FROM_ADDRESS
        self.from_address = from_address
        self.from_name = from_name
        self._client = client

    @property
    def client(self) -> SendGridAPIClient:
        if self._client is None:
            self._client = SendGridAPIClient(self.api_key)
        return self._client

    def build_message(self, to_email: str, code: str) -> Mail:
        plain_text = f"Your sign-in code is: {code}\n\nUse this code to finish signing in."
        html = f"<strong>Your sign-in code is: {code}</strong><br>Use this code to finish signing in."

        message = Mail(
            from_email=Email(self.from_address, self.from_name),
            to_emails=To(to_email),
            subject=SIGNIN_SUBJECT,
            plain_text_content=plain_text,
            html_content=html,
        )
        return message

    def send_code(self, to_email: str, code: str) -> None:
        """
        Send ``code`` to ``to_email``.

        Raises:
            EmailDispatchError: SendGrid is not configured, unreachable, or
                answered with a non-2xx status.
        """
        if not self.api_key:
            raise EmailDispatchError('SENDGRID_API_KEY not set, cannot send email')

        message = self.build_message(to_email, code)
        try:
            response = self.client.send(message)
        except Exception as e:
            logger.error(f"SendGrid send failed: {e}", email_hash=hash_email(to_email))
            raise EmailDispatchError('Failed to send email') from e

        if response.status_code >= 300:
            logger.error(
                f"SendGrid returned non-success status {response.status_code}",
                email_hash=hash_email(to_email),
                status_code=response.status_code,
            )
            raise EmailDispatchError('Failed to send email')

        logger.info("Sign-in code email sent",
                    email_hash=hash_email(to_email), status_code=response.status_code)
