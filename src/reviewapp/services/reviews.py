"""Review submission for movies."""

import logging

from fastapi import status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from reviewapp.models import Review, User, is_valid_id
from reviewapp.models.review import ReviewWrite
from reviewapp.services.errors import ServiceError

logger = logging.getLogger(__name__)


class ReviewError(ServiceError):
    """Review operation refused."""


class InvalidMovie(ReviewError):
    message = "Invalid movie!"


class UnverifiedUser(ReviewError):
    message = "Please verify your email first!"


class DuplicateReview(ReviewError):
    message = "Invalid request, review is already there!"


class InvalidReview(ReviewError):
    message = "Invalid review ID!"


class ReviewNotFound(ReviewError):
    message = "Review not found!"
    status_code = status.HTTP_404_NOT_FOUND


async def add_review(session: AsyncSession, user: User, movie_id: str, review_in: ReviewWrite) -> Review:
    """Record the user's review of a movie. One review per user and movie."""
    if not is_valid_id(movie_id):
        raise InvalidMovie()
    if not user.is_verified:
        raise UnverifiedUser()

    stmt = select(Review).where(Review.owner_id == user.id, Review.movie_id == movie_id)
    result = await session.execute(stmt)
    if result.scalar_one_or_none():
        raise DuplicateReview()

    review = Review(
        owner_id=user.id,
        movie_id=movie_id,
        content=review_in.content,
        rating=review_in.rating,
    )
    session.add(review)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise DuplicateReview() from e

    logger.info(f"User {user.id} reviewed movie {movie_id}")
    return review


async def update_review(session: AsyncSession, user: User, review_id: str, review_in: ReviewWrite) -> Review:
    """Update content and rating of a review the user owns."""
    if not is_valid_id(review_id):
        raise InvalidReview()

    stmt = select(Review).where(Review.id == review_id, Review.owner_id == user.id)
    result = await session.execute(stmt)
    review = result.scalar_one_or_none()
    if not review:
        raise ReviewNotFound()

    review.content = review_in.content
    review.rating = review_in.rating
    session.add(review)
    await session.commit()

    return review
