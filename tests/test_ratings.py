"""Tests for the book rating recompute."""
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from bookspace.models import Review
from bookspace.services.errors import NotFoundError
from bookspace.services.ratings import recompute_book_rating


def _add_reviews(db: Session, book, user, ratings):
    reviews = [Review(book_id=book.id, user_id=user.id, rating=r, comment="ok") for r in ratings]
    db.add_all(reviews)
    db.commit()
    return reviews


def test_rating_is_rounded_mean_of_reviews(db: Session, make_book, user):
    book = make_book("Rated")
    _add_reviews(db, book, user, [4, 5, 3])

    recompute_book_rating(db, book.id)
    db.commit()
    db.refresh(book)

    assert book.rating == 4.0
    assert book.ratings_count == 3


@pytest.mark.parametrize(
    "ratings, expected",
    [
        ([4, 4, 5], 4.3),
        ([1, 2], 1.5),
        ([5, 4, 4, 4], 4.3),  # 4.25 rounds half up
        ([5], 5.0),
    ],
)
def test_rating_rounding(db: Session, make_book, user, ratings, expected):
    book = make_book("Rounded")
    _add_reviews(db, book, user, ratings)

    book = recompute_book_rating(db, book.id)

    assert book.rating == expected
    assert book.ratings_count == len(ratings)


def test_removing_every_review_resets_rating(db: Session, make_book, user):
    book = make_book("Emptied", rating=3.5, ratings_count=2)
    reviews = _add_reviews(db, book, user, [3, 4])
    for review in reviews:
        db.delete(review)
    db.commit()

    book = recompute_book_rating(db, book.id)

    assert book.rating == 0
    assert book.ratings_count == 0


def test_recompute_ignores_other_books(db: Session, make_book, user):
    book = make_book("Mine")
    other = make_book("Other")
    _add_reviews(db, book, user, [2])
    _add_reviews(db, other, user, [5, 5])

    assert recompute_book_rating(db, book.id).rating == 2.0


def test_unknown_book_raises(db: Session):
    with pytest.raises(NotFoundError):
        recompute_book_rating(db, uuid4())
