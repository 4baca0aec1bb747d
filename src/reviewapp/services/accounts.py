"""Account lifecycle: registration, email verification, password reset, sign-in."""

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from fastapi import status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import delete, select

from reviewapp.config import Settings
from reviewapp.models import EmailVerificationToken, PasswordResetToken, User, is_valid_id
from reviewapp.services.auth import create_token
from reviewapp.services.email import EmailService
from reviewapp.services.errors import ServiceError
from reviewapp.services.security import (
    generate_otp,
    generate_reset_token,
    hash_password,
    hash_secret,
    pwd_context,
    verify_password,
    verify_secret,
)

logger = logging.getLogger(__name__)

TokenModel = type[EmailVerificationToken] | type[PasswordResetToken]


class AccountError(ServiceError):
    """Account operation refused."""


class DuplicateEmail(AccountError):
    message = "This email is already in use"


class InvalidUser(AccountError):
    message = "Invalid user"


class UserNotFound(AccountError):
    message = "User not found"
    status_code = status.HTTP_404_NOT_FOUND


class AlreadyVerified(AccountError):
    message = "User already verified"


class TokenNotFound(AccountError):
    message = "Token not found"
    status_code = status.HTTP_404_NOT_FOUND


class OTPMismatch(AccountError):
    message = "OTP not matched"


class TooSoon(AccountError):
    message = "Only after one hour you can request for another token!"


class MissingField(AccountError):
    message = "Invalid request!"


class InvalidResetToken(AccountError):
    message = "Unauthorized access, invalid request!"


class SamePassword(AccountError):
    message = "The new password must be different from the old one"


class CredentialMismatch(AccountError):
    message = "Email/Password mismatch"


@dataclass(frozen=True)
class ResetTokenGrant:
    """Proof that a password reset token matched, handed to reset_password."""

    user: User
    token: PasswordResetToken


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountService:
    """Orchestrates the account flows over one database session.

    Each public method performs its lookups, commits its changes and only
    then sends mail, so a failed delivery never rolls anything back.
    """

    def __init__(self, session: AsyncSession, config: Settings, email: EmailService):
        self.session = session
        self.config = config
        self.email = email

    async def register(self, name: str, email: str, password: str) -> User:
        """Create an unverified user and email them a verification OTP."""
        email = normalize_email(email)
        if await self._get_user_by_email(email):
            raise DuplicateEmail()

        user = User(name=name.strip(), email=email, password_hash=hash_password(password))
        otp = generate_otp(self.config.otp_length)
        try:
            self.session.add(user)
            # No relationship orders these inserts, so the user row goes first.
            await self.session.flush()
            self.session.add(
                EmailVerificationToken(
                    owner_id=user.id,
                    token_hash=hash_secret(otp),
                    expires_at=self._expiry(self.config.verification_token_ttl_minutes),
                )
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateEmail() from e

        logger.info(f"Registered user {user.id}")
        await self._deliver("verification", user.email, self.email.send_verification_otp(user.email, otp))
        return user

    async def verify_email(self, user_id: str, otp: str) -> tuple[User, str]:
        """Consume the user's verification OTP and issue a session token."""
        user = await self._get_unverified_user(user_id)

        token = await self._get_live_token(EmailVerificationToken, user.id)
        if not token:
            raise TokenNotFound()
        if not verify_secret(otp, token.token_hash):
            raise OTPMismatch()

        # Single use: a concurrent verification that already consumed the row wins.
        if not await self._consume_token(EmailVerificationToken, token.id):
            await self.session.rollback()
            raise TokenNotFound()

        user.is_verified = True
        self.session.add(user)
        await self.session.commit()

        logger.info(f"Verified email for user {user.id}")
        await self._deliver("welcome", user.email, self.email.send_welcome(user.email))
        return user, create_token(user, self.config)

    async def resend_verification(self, user_id: str) -> None:
        """Issue a fresh OTP once the previous one has expired."""
        user = await self._get_unverified_user(user_id)

        otp = generate_otp(self.config.otp_length)
        await self._issue_token(
            EmailVerificationToken,
            user,
            hash_secret(otp),
            self.config.verification_token_ttl_minutes,
        )

        logger.info(f"Reissued verification OTP for user {user.id}")
        await self._deliver("verification", user.email, self.email.send_verification_otp(user.email, otp))

    async def forgot_password(self, email: str | None) -> None:
        """Email a password reset link carrying a one-time token."""
        if not email or not email.strip():
            raise MissingField("Email is required")

        user = await self._get_user_by_email(normalize_email(email))
        if not user:
            raise UserNotFound()

        token = generate_reset_token(self.config.password_reset_token_bytes)
        await self._issue_token(
            PasswordResetToken,
            user,
            hash_secret(token),
            self.config.password_reset_ttl_minutes,
        )

        logger.info(f"Issued password reset token for user {user.id}")
        reset_url = self.config.reset_password_url(token, user.id)
        await self._deliver("password reset", user.email, self.email.send_password_reset_link(user.email, reset_url))

    async def validate_reset_token(self, token: str | None, user_id: str | None) -> ResetTokenGrant:
        """Check a token/user pair from a reset link.

        Raises:
            MissingField: either value is blank
            InvalidUser: the user id is malformed
            InvalidResetToken: no live token for the user, or it does not match
        """
        if not token or not user_id:
            raise MissingField()
        if not is_valid_id(user_id):
            raise InvalidUser()

        record = await self._get_live_token(PasswordResetToken, user_id)
        if not record or not verify_secret(token, record.token_hash):
            raise InvalidResetToken()

        user = await self.session.get(User, user_id)
        if not user:
            raise InvalidResetToken()

        return ResetTokenGrant(user=user, token=record)

    async def reset_password(self, grant: ResetTokenGrant, new_password: str) -> None:
        """Replace the password of a user holding a validated reset token."""
        user = grant.user
        if verify_password(new_password, user.password_hash):
            raise SamePassword()

        if not await self._consume_token(PasswordResetToken, grant.token.id):
            await self.session.rollback()
            raise InvalidResetToken()

        user.password_hash = hash_password(new_password)
        self.session.add(user)
        await self.session.commit()

        logger.info(f"Password reset for user {user.id}")
        await self._deliver(
            "password reset confirmation",
            user.email,
            self.email.send_password_reset_confirmation(user.email),
        )

    async def sign_in(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and issue a session token.

        Unknown emails and wrong passwords fail identically.
        """
        user = await self._get_user_by_email(normalize_email(email))
        if not user:
            # Burn the same hashing time as a real comparison.
            pwd_context.dummy_verify()
            raise CredentialMismatch()
        if not verify_password(password, user.password_hash):
            raise CredentialMismatch()

        return user, create_token(user, self.config)

    async def _get_user_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def _get_unverified_user(self, user_id: str) -> User:
        if not is_valid_id(user_id):
            raise InvalidUser()

        user = await self.session.get(User, user_id)
        if not user:
            raise UserNotFound()
        if user.is_verified:
            raise AlreadyVerified()
        return user

    async def _get_live_token(self, model: TokenModel, owner_id: str):
        stmt = select(model).where(
            model.owner_id == owner_id,
            model.expires_at > datetime.now(UTC),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _issue_token(self, model: TokenModel, user: User, token_hash: str, ttl_minutes: int) -> None:
        """Store a new token for the user unless a live one already exists."""
        if await self._get_live_token(model, user.id):
            raise TooSoon(self._cooldown_message(ttl_minutes))

        # An expired row still holds the owner's unique slot.
        await self.session.execute(
            delete(model).where(
                model.owner_id == user.id,
                model.expires_at <= datetime.now(UTC),
            )
        )
        self.session.add(model(owner_id=user.id, token_hash=token_hash, expires_at=self._expiry(ttl_minutes)))
        try:
            await self.session.commit()
        except IntegrityError as e:
            # Another request inserted a token between our check and commit.
            await self.session.rollback()
            raise TooSoon(self._cooldown_message(ttl_minutes)) from e

    async def _consume_token(self, model: TokenModel, token_id: str) -> bool:
        result = await self.session.execute(delete(model).where(model.id == token_id))
        return result.rowcount == 1

    async def _deliver(self, kind: str, to: str, sending: Awaitable[bool]) -> None:
        if not await sending:
            logger.warning(f"Failed to deliver {kind} email to {to}")

    @staticmethod
    def _expiry(ttl_minutes: int) -> datetime:
        return datetime.now(UTC) + timedelta(minutes=ttl_minutes)

    @staticmethod
    def _cooldown_message(ttl_minutes: int) -> str:
        if ttl_minutes == 60:
            return TooSoon.message
        return f"Only after {ttl_minutes} minutes you can request for another token!"
