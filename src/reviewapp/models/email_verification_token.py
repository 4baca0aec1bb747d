"""Email verification OTP model."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from reviewapp.models.base import generate_nanoid, utcnow


class EmailVerificationToken(SQLModel, table=True):
    """Pending email verification for a user.

    Only the salted hash of the OTP is stored. A row is live until
    ``expires_at``; at most one row exists per owner.
    """

    __tablename__ = "email_verification_tokens"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    owner_id: str = Field(
        foreign_key="users.id",
        ondelete="CASCADE",
        unique=True,
        index=True,
        max_length=21,
    )
    token_hash: str = Field(max_length=255, description="Salted hash of the OTP")
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
    )
    expires_at: datetime = Field(
        index=True,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        description="Token expiration time",
    )
