import logging
from uuid import UUID
from sqlalchemy.orm import Session
from bookspace.models import Book, Review
from bookspace.services.errors import NotFoundError
from bookspace.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


def recompute_book_rating(db: Session, book_id: UUID) -> Book:
    """
    Recompute a book's rating and ratings_count from all of its reviews.

    rating is the mean review rating rounded to one decimal (0 with no
    reviews). Always a full recompute. Flushes but does not commit; database
    errors propagate to the caller.
    """
    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise NotFoundError("Book", book_id)

    ratings = [r for (r,) in db.query(Review.rating).filter(Review.book_id == book_id).all()]
    ratings_count = len(ratings)
    rating = round_half_up(sum(ratings) / ratings_count, 1) if ratings_count else 0

    book.rating = rating
    book.ratings_count = ratings_count
    db.flush()

    logger.info("Recomputed rating for book %s: rating=%s ratings_count=%s", book_id, rating, ratings_count)
    return book
