from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import asc, desc
from typing import Optional, List
from uuid import UUID
import logging
from bookspace.database import get_db
from bookspace.core.auth import get_current_user
from bookspace.core.config import settings
from bookspace.models import Book, Review, User
from bookspace.schemas.book import BookResponse, BookDetailResponse, RecommendedBooksResponse
from bookspace.services import recommendation_engine
from bookspace.services.cache import TTLCache
from bookspace.services.collection import collection_state, find_entry, get_book_or_404
from bookspace.services.recommendation_engine import get_recommendation_cache
from bookspace.utils.timing import now_ms, log_elapsed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["books"])

# Sort with allowlist to keep arbitrary columns out of ORDER BY
SORT_COLUMNS = {
    "title": Book.title,
    "rating": Book.rating,
    "ratings_count": Book.ratings_count,
    "page_count": Book.page_count,
    "release_year": Book.release_year,
    "created_at": Book.created_at,
}


@router.get("", response_model=List[BookResponse])
def get_books(
    q: Optional[str] = Query(None, description="Search in title"),
    genre: Optional[str] = Query(None, description="Only books tagged with this genre"),
    sort: str = Query("title", description="Sort field: title, rating, ratings_count, page_count, release_year, created_at"),
    order: str = Query("asc", description="Sort order: asc or desc"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Browse the catalog with optional title search and genre filter."""
    query = db.query(Book)

    if q:
        query = query.filter(Book.title.ilike(f"%{q.strip()}%"))

    sort_col = SORT_COLUMNS.get(sort, Book.title)
    sort_fn = desc if order.lower() == "desc" else asc
    query = query.order_by(sort_fn(sort_col), asc(Book.title))

    if genre:
        # Genres live in a JSON column; filter in Python so SQLite and Postgres behave the same
        wanted = genre.strip().lower()
        books = [b for b in query.all() if wanted in {g.lower() for g in (b.genres or [])}]
        books = books[offset:offset + limit]
    else:
        books = query.offset(offset).limit(limit).all()

    logger.info("Fetched %d books (q=%s, genre=%s, sort=%s, order=%s)", len(books), q, genre, sort, order)
    return [BookResponse.from_book(b) for b in books]


@router.get("/random", response_model=List[BookResponse])
def get_random_books(
    limit: int = Query(recommendation_engine.DISCOVERY_LIMIT, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return [BookResponse.from_book(b) for b in recommendation_engine.random_books(db, limit=limit)]


@router.get("/popular", response_model=List[BookResponse])
def get_popular_books(
    limit: int = Query(recommendation_engine.DISCOVERY_LIMIT, ge=1, le=50),
    db: Session = Depends(get_db),
):
    """Random picks among the best rated books."""
    return [BookResponse.from_book(b) for b in recommendation_engine.popular_books(db, limit=limit)]


@router.get("/by-mood", response_model=List[BookResponse])
def get_books_by_mood(
    moods: Optional[List[str]] = Query(None, description="Moods to match; defaults to feel-good moods"),
    limit: int = Query(recommendation_engine.DISCOVERY_LIMIT, ge=1, le=50),
    db: Session = Depends(get_db),
):
    books = recommendation_engine.books_by_moods(db, moods=moods, limit=limit)
    return [BookResponse.from_book(b) for b in books]


@router.get("/{book_id}", response_model=BookDetailResponse)
def get_book(
    book_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_recommendation_cache),
):
    """Book page: the book, the user's collection state for it and recommended books."""
    t0 = now_ms()
    book = get_book_or_404(db, book_id)
    entry = find_entry(db, user, book.id)
    recommended = recommendation_engine.get_recommended_books(db, book, cache=cache)
    has_reviewed = db.query(Review.id).filter(Review.book_id == book.id, Review.user_id == user.id).first() is not None
    if settings.DEBUG:
        log_elapsed(t0, f"book_detail book={book_id} user={user.id}", logger.debug)

    return BookDetailResponse(
        book=BookResponse.from_book(book),
        collection=collection_state(entry),
        recommended_books=recommended,
        user_has_reviewed=has_reviewed,
    )


@router.get("/{book_id}/recommendations", response_model=RecommendedBooksResponse)
def get_book_recommendations(
    book_id: UUID,
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_recommendation_cache),
):
    """Up to RECOMMENDATION_LIMIT books sharing genres with this one, cached per book."""
    book = get_book_or_404(db, book_id)
    items = recommendation_engine.get_recommended_books(db, book, cache=cache)
    return RecommendedBooksResponse(book_id=book.id, items=items)
