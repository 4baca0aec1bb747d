"""Email service tests."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from reviewapp.config import Settings
from reviewapp.services.email import (
    ConsoleEmailBackend,
    EmailService,
    ResendEmailBackend,
    SMTPEmailBackend,
    get_email_backend,
)


class TestConsoleEmailBackend:
    """Tests for console email backend."""

    @pytest.mark.asyncio
    async def test_send_logs_email(self, caplog):
        backend = ConsoleEmailBackend()

        with caplog.at_level(logging.INFO):
            result = await backend.send(
                to="test@example.com",
                subject="Test Subject",
                html="<p>Hello</p>",
                text="Hello",
                sender="verification@reviewapp.com",
            )

        assert result is True
        assert "test@example.com" in caplog.text
        assert "Test Subject" in caplog.text
        assert "verification@reviewapp.com" in caplog.text


class TestSMTPEmailBackend:
    """Tests for SMTP email backend."""

    def make_backend(self) -> SMTPEmailBackend:
        return SMTPEmailBackend(
            host="smtp.example.com",
            port=587,
            username="user",
            password="pass",
            from_address="noreply@example.com",
        )

    @pytest.mark.asyncio
    async def test_send_uses_sender_override(self):
        backend = self.make_backend()

        with patch("reviewapp.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            result = await backend.send(
                to="test@example.com",
                subject="Test",
                html="<p>Hello</p>",
                text="Hello",
                sender="security@reviewapp.com",
            )

        assert result is True
        message = mock_send.call_args[0][0]
        assert message["From"] == "security@reviewapp.com"
        assert message["To"] == "test@example.com"
        assert mock_send.call_args[1]["hostname"] == "smtp.example.com"

    @pytest.mark.asyncio
    async def test_send_defaults_to_from_address(self):
        backend = self.make_backend()

        with patch("reviewapp.services.email.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            await backend.send(to="test@example.com", subject="Test", html="<p>Hello</p>")

        assert mock_send.call_args[0][0]["From"] == "noreply@example.com"

    @pytest.mark.asyncio
    async def test_send_failure(self):
        backend = self.make_backend()

        with patch(
            "reviewapp.services.email.aiosmtplib.send",
            new_callable=AsyncMock,
            side_effect=Exception("Connection failed"),
        ):
            result = await backend.send(
                to="test@example.com",
                subject="Test",
                html="<p>Hello</p>",
            )

        assert result is False


class TestResendEmailBackend:
    """Tests for Resend email backend."""

    @pytest.mark.asyncio
    async def test_send_success(self):
        backend = ResendEmailBackend(api_key="re_test_key", from_address="noreply@example.com")

        mock_response = MagicMock()
        mock_response.raise_for_status = MagicMock()

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = mock_response

            result = await backend.send(
                to="test@example.com",
                subject="Test",
                html="<p>Hello</p>",
                text="Hello",
            )

        assert result is True
        call_kwargs = mock_post.call_args[1]
        assert call_kwargs["json"]["to"] == ["test@example.com"]
        assert call_kwargs["json"]["from"] == "noreply@example.com"
        assert call_kwargs["headers"]["Authorization"] == "Bearer re_test_key"

    @pytest.mark.asyncio
    async def test_send_http_error(self):
        backend = ResendEmailBackend(api_key="re_test_key", from_address="noreply@example.com")

        mock_response = MagicMock()
        mock_response.status_code = 401
        mock_response.text = "Unauthorized"
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Unauthorized",
            request=MagicMock(),
            response=mock_response,
        )

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = mock_response

            result = await backend.send(to="test@example.com", subject="Test", html="<p>Hello</p>")

        assert result is False


class TestGetEmailBackend:
    """Tests for get_email_backend factory."""

    def test_console_backend(self):
        backend = get_email_backend(Settings(email_backend="console"))

        assert isinstance(backend, ConsoleEmailBackend)

    def test_smtp_backend(self):
        config = Settings(email_backend="smtp", smtp_host="smtp.example.com", smtp_port=2525)

        backend = get_email_backend(config)

        assert isinstance(backend, SMTPEmailBackend)
        assert backend.host == "smtp.example.com"
        assert backend.port == 2525

    def test_resend_backend(self):
        backend = get_email_backend(Settings(email_backend="resend", resend_api_key="re_test_key"))

        assert isinstance(backend, ResendEmailBackend)
        assert backend.api_key == "re_test_key"

    def test_invalid_backend(self):
        config = MagicMock()
        config.email_backend = "invalid"

        with pytest.raises(ValueError, match="Unknown email backend"):
            get_email_backend(config)


class TestEmailService:
    """Tests for EmailService messages."""

    def make_service(self) -> tuple[EmailService, AsyncMock]:
        mock_backend = AsyncMock()
        mock_backend.send.return_value = True
        return EmailService(backend=mock_backend, config=Settings()), mock_backend

    @pytest.mark.asyncio
    async def test_send_verification_otp(self):
        service, backend = self.make_service()

        result = await service.send_verification_otp("test@example.com", "482913")

        assert result is True
        call_kwargs = backend.send.call_args[1]
        assert call_kwargs["to"] == "test@example.com"
        assert call_kwargs["subject"] == "Email Verification"
        assert call_kwargs["sender"] == "verification@reviewapp.com"
        assert "482913" in call_kwargs["html"]
        assert "482913" in call_kwargs["text"]

    @pytest.mark.asyncio
    async def test_send_password_reset_link(self):
        service, backend = self.make_service()
        url = "http://localhost:3000/auth/reset-password?token=abc123&id=xyz"

        await service.send_password_reset_link("test@example.com", url)

        call_kwargs = backend.send.call_args[1]
        assert call_kwargs["subject"] == "Reset Password Link"
        assert call_kwargs["sender"] == "security@reviewapp.com"
        assert url in call_kwargs["html"]
        assert url in call_kwargs["text"]

    @pytest.mark.asyncio
    async def test_send_welcome_and_confirmation(self):
        service, backend = self.make_service()

        await service.send_welcome("test@example.com")
        assert backend.send.call_args[1]["subject"] == "Welcome Email"

        await service.send_password_reset_confirmation("test@example.com")
        assert backend.send.call_args[1]["subject"] == "Password Reset Successfully"

    @pytest.mark.asyncio
    async def test_failure_is_reported(self):
        service, backend = self.make_service()
        backend.send.return_value = False

        assert await service.send_welcome("test@example.com") is False

    def test_lazy_backend_loading(self):
        service = EmailService()

        with patch("reviewapp.services.email.get_email_backend") as mock_get_backend:
            mock_get_backend.return_value = ConsoleEmailBackend()

            backend = service.backend
            backend2 = service.backend

        assert isinstance(backend, ConsoleEmailBackend)
        assert backend is backend2
        mock_get_backend.assert_called_once()
