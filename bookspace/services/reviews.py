"""
Review service: validation, ownership checks and the rating recompute that
follows every create, update and delete.

The review write is committed first and the book rating afterwards, so a
failing recompute leaves the review in place.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from sqlalchemy.orm import Session, joinedload
from bookspace.models import Book, Review, User
from bookspace.services.errors import ForbiddenError, NotFoundError, ValidationFailed
from bookspace.services.ratings import recompute_book_rating

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _coerce_rating(value: Any) -> Optional[int]:
    """Integer rating from a number or numeric string, None if it isn't a whole number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return _coerce_rating(float(value.strip()))
        except ValueError:
            return None
    return None


def validate_review(rating: Any, comment: Any) -> Dict[str, str]:
    """Return field -> message for every invalid field; empty when the review is valid."""
    errors: Dict[str, str] = {}

    if rating is None or (isinstance(rating, str) and not rating.strip()):
        errors["rating"] = "Rating between 1-5 is required"
    else:
        value = _coerce_rating(rating)
        if value is None:
            errors["rating"] = "Rating must be a whole number"
        elif not MIN_RATING <= value <= MAX_RATING:
            errors["rating"] = f"Rating must be between {MIN_RATING} and {MAX_RATING}"

    if not isinstance(comment, str) or not comment.strip():
        errors["comment"] = "Review comment is required"

    return errors


def _checked(rating: Any, comment: Any) -> Tuple[int, str]:
    errors = validate_review(rating, comment)
    if errors:
        raise ValidationFailed(errors)
    return _coerce_rating(rating), comment.strip()


def _get_owned_review(db: Session, user: User, review_id: UUID) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise NotFoundError("Review", review_id)
    if review.user_id != user.id:
        logger.warning("User %s tried to modify review %s owned by %s", user.id, review_id, review.user_id)
        raise ForbiddenError("You can only change your own reviews")
    return review


def create_review(db: Session, user: User, book_id: UUID, rating: Any, comment: Any) -> Tuple[Review, Book]:
    rating_value, comment_value = _checked(rating, comment)

    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise NotFoundError("Book", book_id)

    review = Review(book_id=book.id, user_id=user.id, rating=rating_value, comment=comment_value)
    db.add(review)
    db.commit()

    book = recompute_book_rating(db, book.id)
    db.commit()
    db.refresh(review)
    return review, book


def update_review(db: Session, user: User, review_id: UUID, rating: Any, comment: Any) -> Tuple[Review, Book]:
    review = _get_owned_review(db, user, review_id)
    rating_value, comment_value = _checked(rating, comment)

    review.rating = rating_value
    review.comment = comment_value
    db.commit()

    book = recompute_book_rating(db, review.book_id)
    db.commit()
    db.refresh(review)
    return review, book


def delete_review(db: Session, user: User, review_id: UUID) -> Book:
    review = _get_owned_review(db, user, review_id)
    book_id = review.book_id

    db.delete(review)
    db.commit()

    book = recompute_book_rating(db, book_id)
    db.commit()
    return book


def list_book_reviews(db: Session, book_id: UUID) -> List[Review]:
    if not db.query(Book.id).filter(Book.id == book_id).first():
        raise NotFoundError("Book", book_id)
    return (
        db.query(Review)
        .options(joinedload(Review.user))
        .filter(Review.book_id == book_id)
        .order_by(Review.created_at.desc())
        .all()
    )


def list_user_reviews(db: Session, user: User) -> List[Review]:
    return (
        db.query(Review)
        .options(joinedload(Review.book))
        .filter(Review.user_id == user.id)
        .order_by(Review.created_at.desc())
        .all()
    )
