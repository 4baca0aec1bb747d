"""Base model with common fields and mixins."""

import re
from datetime import UTC, datetime

from nanoid import generate as nanoid_generate
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

NANOID_SIZE = 21

# nanoid's default alphabet is URL-safe: A-Z a-z 0-9 _ -
_ID_PATTERN = re.compile(rf"^[A-Za-z0-9_-]{{{NANOID_SIZE}}}$")


def generate_nanoid() -> str:
    """Generate a nanoid string ID (21 chars, URL-safe)."""
    return nanoid_generate(size=NANOID_SIZE)


def is_valid_id(value: object) -> bool:
    """Check that a value is shaped like an ID produced by generate_nanoid."""
    return isinstance(value, str) and bool(_ID_PATTERN.match(value))


def utcnow() -> datetime:
    return datetime.now(UTC)


class TimestampMixin(SQLModel):
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        description="Timestamp when the record was created",
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        sa_column_kwargs={"onupdate": utcnow},
        description="Timestamp when the record was last updated",
    )
