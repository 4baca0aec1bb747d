"""Movie review model."""

from pydantic import field_validator
from sqlalchemy import Text, UniqueConstraint
from sqlmodel import Field, SQLModel

from reviewapp.models.base import TimestampMixin, generate_nanoid

MIN_RATING = 1.0
MAX_RATING = 10.0


class Review(TimestampMixin, SQLModel, table=True):
    """A user's review of a movie."""

    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("owner_id", "movie_id", name="uq_reviews_owner_movie"),)

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    owner_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True, max_length=21)
    movie_id: str = Field(index=True, max_length=21)
    content: str | None = Field(default=None, sa_type=Text)
    rating: float


class ReviewWrite(SQLModel):
    """Body for adding or updating a review."""

    content: str | None = Field(default=None, max_length=5000)
    rating: float

    @field_validator("rating")
    @classmethod
    def check_rating(cls, value: float) -> float:
        if not MIN_RATING <= value <= MAX_RATING:
            raise ValueError("Rating values must be between 1 and 10.")
        return value


class ReviewRead(SQLModel):
    """Schema for reading a review."""

    id: str
    owner_id: str
    movie_id: str
    content: str | None
    rating: float
