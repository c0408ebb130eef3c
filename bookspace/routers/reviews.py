from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from bookspace.database import get_db
from bookspace.core.auth import get_current_user
from bookspace.models import User
from bookspace.schemas.review import ReviewRequest, ReviewResponse, ReviewMutationResponse
from bookspace.services import reviews as review_service
from bookspace.utils.instrumentation import log_event

logger = logging.getLogger(__name__)
router = APIRouter(tags=["reviews"])


@router.get("/books/{book_id}/reviews", response_model=List[ReviewResponse])
def get_book_reviews(book_id: UUID, db: Session = Depends(get_db)):
    """Reviews of a book, newest first."""
    return [ReviewResponse.from_review(r) for r in review_service.list_book_reviews(db, book_id)]


@router.post(
    "/books/{book_id}/reviews",
    response_model=ReviewMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    book_id: UUID,
    payload: ReviewRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    review, book = review_service.create_review(db, user, book_id, payload.rating, payload.comment)

    log_event(
        db=db,
        event_name="review_created",
        user_id=user.id,
        properties={"book_id": str(book.id), "review_id": str(review.id), "rating": review.rating},
    )
    db.commit()

    return ReviewMutationResponse(
        review=ReviewResponse.from_review(review),
        book_rating=book.rating,
        book_ratings_count=book.ratings_count,
    )


@router.put("/reviews/{review_id}", response_model=ReviewMutationResponse)
async def update_review(
    review_id: UUID,
    payload: ReviewRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    review, book = review_service.update_review(db, user, review_id, payload.rating, payload.comment)

    log_event(
        db=db,
        event_name="review_updated",
        user_id=user.id,
        properties={"book_id": str(book.id), "review_id": str(review.id), "rating": review.rating},
    )
    db.commit()

    return ReviewMutationResponse(
        review=ReviewResponse.from_review(review),
        book_rating=book.rating,
        book_ratings_count=book.ratings_count,
    )


@router.delete("/reviews/{review_id}", response_model=ReviewMutationResponse)
async def delete_review(
    review_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    book = review_service.delete_review(db, user, review_id)

    log_event(
        db=db,
        event_name="review_deleted",
        user_id=user.id,
        properties={"book_id": str(book.id), "review_id": str(review_id)},
    )
    db.commit()

    return ReviewMutationResponse(
        deleted=True,
        review_id=str(review_id),
        book_rating=book.rating,
        book_ratings_count=book.ratings_count,
    )


@router.get("/me/reviews", response_model=List[ReviewResponse])
async def get_my_reviews(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The current user's reviews with their books, newest first."""
    return [
        ReviewResponse.from_review(r, include_book=True)
        for r in review_service.list_user_reviews(db, user)
    ]
