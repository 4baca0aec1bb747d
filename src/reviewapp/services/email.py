"""Email service for sending transactional emails."""

import logging
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib
import httpx

from reviewapp.config import Settings, settings

logger = logging.getLogger(__name__)


class EmailBackend(ABC):
    """Abstract base class for email backends."""

    @abstractmethod
    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
        sender: str | None = None,
    ) -> bool:
        """Send an email.

        Args:
            to: Recipient email address
            subject: Email subject
            html: HTML content
            text: Plain text content (optional, derived from html if not provided)
            sender: From address overriding the backend default

        Returns:
            True if sent successfully
        """
        pass


class ConsoleEmailBackend(EmailBackend):
    """Email backend that logs to console (for development)."""

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
        sender: str | None = None,
    ) -> bool:
        """Log email to console instead of sending."""
        logger.info(
            f"\n{'='*60}\n"
            f"EMAIL (console backend - not sent)\n"
            f"{'='*60}\n"
            f"From: {sender or '-'}\n"
            f"To: {to}\n"
            f"Subject: {subject}\n"
            f"{'='*60}\n"
            f"{text or html}\n"
            f"{'='*60}\n"
        )
        return True


class SMTPEmailBackend(EmailBackend):
    """Email backend using SMTP."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        from_address: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
        sender: str | None = None,
    ) -> bool:
        """Send email via SMTP."""
        message = MIMEMultipart("alternative")
        message["From"] = sender or self.from_address
        message["To"] = to
        message["Subject"] = subject

        if text:
            message.attach(MIMEText(text, "plain"))
        message.attach(MIMEText(html, "html"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                start_tls=self.use_tls,
            )
            logger.info(f"Email sent via SMTP to {to}")
            return True
        except Exception as e:
            logger.error(f"Failed to send email via SMTP to {to}: {e}")
            return False


class ResendEmailBackend(EmailBackend):
    """Email backend using Resend API."""

    def __init__(self, api_key: str, from_address: str):
        self.api_key = api_key
        self.from_address = from_address

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
        sender: str | None = None,
    ) -> bool:
        """Send email via Resend API."""
        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    "https://api.resend.com/emails",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "from": sender or self.from_address,
                        "to": [to],
                        "subject": subject,
                        "html": html,
                        "text": text,
                    },
                    timeout=30.0,
                )
                response.raise_for_status()
                logger.info(f"Email sent via Resend to {to}")
                return True
            except httpx.HTTPStatusError as e:
                logger.error(f"Resend API error: {e.response.status_code} - {e.response.text}")
                return False
            except Exception as e:
                logger.error(f"Failed to send email via Resend to {to}: {e}")
                return False


def get_email_backend(config: Settings | None = None) -> EmailBackend:
    """Get the configured email backend."""
    config = config or settings
    if config.email_backend == "console":
        return ConsoleEmailBackend()
    elif config.email_backend == "smtp":
        return SMTPEmailBackend(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            use_tls=config.smtp_use_tls,
            from_address=config.email_from,
        )
    elif config.email_backend == "resend":
        return ResendEmailBackend(
            api_key=config.resend_api_key,
            from_address=config.email_from,
        )
    else:
        raise ValueError(f"Unknown email backend: {config.email_backend}")


def _layout(body: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: #f9fafb; border-radius: 8px; padding: 30px;">
{body}
    </div>
</body>
</html>
"""


class EmailService:
    """High-level email service for sending application emails.

    Every method returns the backend's delivery result. Callers send after
    their database changes are committed, so a failed send never undoes
    them; delivery is at most once.
    """

    def __init__(self, backend: EmailBackend | None = None, config: Settings | None = None):
        self._backend = backend
        self.config = config or settings

    @property
    def backend(self) -> EmailBackend:
        """Lazy-load the backend."""
        if self._backend is None:
            self._backend = get_email_backend(self.config)
        return self._backend

    async def send_verification_otp(self, to: str, otp: str) -> bool:
        """Send the one-time passcode that verifies an email address."""
        ttl = self.config.verification_token_ttl_minutes
        html = _layout(
            f"""        <p>Your verification OTP</p>
        <h1 style="letter-spacing: 4px;">{otp}</h1>
        <p style="color: #666; font-size: 14px;">This code expires in {ttl} minutes.</p>"""
        )
        text = f"Your verification OTP: {otp}\n\nThis code expires in {ttl} minutes.\n"
        return await self.backend.send(
            to=to,
            subject="Email Verification",
            html=html,
            text=text,
            sender=self.config.verification_email_from,
        )

    async def send_welcome(self, to: str) -> bool:
        html = _layout("        <h1>Welcome to our app and thanks for choosing us.</h1>")
        text = "Welcome to our app and thanks for choosing us.\n"
        return await self.backend.send(
            to=to,
            subject="Welcome Email",
            html=html,
            text=text,
            sender=self.config.verification_email_from,
        )

    async def send_password_reset_link(self, to: str, reset_url: str) -> bool:
        """Send a link to the frontend reset page.

        Args:
            to: Recipient email address
            reset_url: Full URL carrying the plaintext token and user id

        Returns:
            True if sent successfully
        """
        ttl = self.config.password_reset_ttl_minutes
        html = _layout(
            f"""        <p>Click here to reset password</p>
        <a href="{reset_url}" style="background: #2563eb; color: white; padding: 12px 30px; border-radius: 6px; text-decoration: none;">Change Password</a>
        <p style="color: #666; font-size: 14px;">This link expires in {ttl} minutes. If you didn't request it, you can ignore this email.</p>"""
        )
        text = f"""
Reset your password
===================

Open the link below to choose a new password.
This link will expire in {ttl} minutes.

{reset_url}

If you didn't request this email, you can safely ignore it.
"""
        return await self.backend.send(
            to=to,
            subject="Reset Password Link",
            html=html,
            text=text,
            sender=self.config.security_email_from,
        )

    async def send_password_reset_confirmation(self, to: str) -> bool:
        html = _layout(
            """        <h1>Password Reset Successfully!</h1>
        <p>Now you can use new password.</p>"""
        )
        text = "Password Reset Successfully!\n\nNow you can use new password.\n"
        return await self.backend.send(
            to=to,
            subject="Password Reset Successfully",
            html=html,
            text=text,
            sender=self.config.security_email_from,
        )


# Global email service instance
email_service = EmailService()
