from pydantic import BaseModel
from typing import Any, Optional
from datetime import datetime


class ReviewRequest(BaseModel):
    # Checked by services.reviews.validate_review
    rating: Any = None
    comment: Any = None


class ReviewerInfo(BaseModel):
    id: str
    name: Optional[str] = None


class ReviewBookInfo(BaseModel):
    id: str
    title: str
    slug: str
    cover_image_url: Optional[str] = None


class ReviewResponse(BaseModel):
    id: str
    book_id: str
    user: ReviewerInfo
    rating: int
    comment: str
    created_at: datetime
    updated_at: datetime
    book: Optional[ReviewBookInfo] = None

    @classmethod
    def from_review(cls, review, include_book: bool = False) -> "ReviewResponse":
        book = None
        if include_book and review.book is not None:
            book = ReviewBookInfo(
                id=str(review.book.id),
                title=review.book.title,
                slug=review.book.slug,
                cover_image_url=review.book.cover_image_url,
            )
        return cls(
            id=str(review.id),
            book_id=str(review.book_id),
            user=ReviewerInfo(
                id=str(review.user_id),
                name=review.user.name if review.user is not None else None,
            ),
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
            updated_at=review.updated_at,
            book=book,
        )


class ReviewMutationResponse(BaseModel):
    success: bool = True
    review: Optional[ReviewResponse] = None
    deleted: bool = False
    review_id: Optional[str] = None
    book_rating: float
    book_ratings_count: int
