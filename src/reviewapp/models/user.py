"""User model."""

from sqlmodel import Field, SQLModel

from reviewapp.models.base import TimestampMixin, generate_nanoid


class User(TimestampMixin, SQLModel, table=True):
    """User account model."""

    __tablename__ = "users"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    name: str = Field(max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=255, description="Salted password hash")
    is_verified: bool = Field(default=False)


class UserRead(SQLModel):
    """Public fields of a user."""

    id: str
    name: str
    email: str
    is_verified: bool


class UserCreated(SQLModel):
    """Fields returned right after registration."""

    id: str
    name: str
    email: str


class UserSession(UserRead):
    """Public user fields plus a freshly issued bearer token."""

    token: str
