"""SQLModel database models."""

from reviewapp.models.base import TimestampMixin, generate_nanoid, is_valid_id
from reviewapp.models.email_verification_token import EmailVerificationToken
from reviewapp.models.password_reset_token import PasswordResetToken
from reviewapp.models.review import Review
from reviewapp.models.user import User

__all__ = [
    "EmailVerificationToken",
    "PasswordResetToken",
    "Review",
    "TimestampMixin",
    "User",
    "generate_nanoid",
    "is_valid_id",
]
