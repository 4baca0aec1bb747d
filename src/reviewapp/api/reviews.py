"""Review endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from reviewapp.api.deps import CurrentUser, SessionDep
from reviewapp.models.review import ReviewRead, ReviewWrite
from reviewapp.services import reviews

router = APIRouter()


class ReviewResponse(BaseModel):
    message: str
    review: ReviewRead


@router.post("/add/{movie_id}", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def add_review(movie_id: str, review_in: ReviewWrite, session: SessionDep, user: CurrentUser):
    """Add the current user's review of a movie."""
    review = await reviews.add_review(session, user, movie_id, review_in)
    return ReviewResponse(message="Your review has been added.", review=ReviewRead.model_validate(review))


@router.patch("/{review_id}", response_model=ReviewResponse)
async def update_review(review_id: str, review_in: ReviewWrite, session: SessionDep, user: CurrentUser):
    """Update one of the current user's reviews."""
    review = await reviews.update_review(session, user, review_id, review_in)
    return ReviewResponse(message="Your review has been updated.", review=ReviewRead.model_validate(review))
