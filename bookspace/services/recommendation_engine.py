from typing import Dict, List, Optional, Sequence
from sqlalchemy.orm import Session
import logging
import random
from bookspace.core.config import settings
from bookspace.models import Book
from bookspace.schemas.book import BookResponse
from bookspace.services.cache import TTLCache

logger = logging.getLogger(__name__)

# Genre-match tiers, checked in this order
TIER_HIGH = "high"
TIER_MEDIUM = "medium"
TIER_LOW = "low"
TIER_ORDER = (TIER_HIGH, TIER_MEDIUM, TIER_LOW)

HIGH_MATCH_MIN = 5
MEDIUM_MATCH_MIN = 3
LOW_MATCH_MIN = 1

DEFAULT_MOODS = ["lighthearted", "inspiring", "funny", "hopeful"]
DISCOVERY_LIMIT = 6

_recommendation_cache = TTLCache(ttl_seconds=settings.RECOMMENDATION_CACHE_TTL_SECONDS)


def get_recommendation_cache() -> TTLCache:
    """FastAPI dependency: the process-wide recommendation cache (overridable in tests)."""
    return _recommendation_cache


def genre_match_count(candidate_genres: Optional[Sequence[str]], source_genres: Optional[Sequence[str]]) -> int:
    """Number of distinct genres the two books share."""
    return len(set(candidate_genres or []) & set(source_genres or []))


def match_tier(count: int) -> Optional[str]:
    """
    Map a shared-genre count to exactly one tier.

    high: 5 or more, medium: 3-4, low: 1-2, None when nothing is shared.
    """
    if count >= HIGH_MATCH_MIN:
        return TIER_HIGH
    if count >= MEDIUM_MATCH_MIN:
        return TIER_MEDIUM
    if count >= LOW_MATCH_MIN:
        return TIER_LOW
    return None


def partition_by_tier(source: Book, candidates: Sequence[Book]) -> Dict[str, List[Book]]:
    """Split candidates into genre-match tiers, dropping the source book and non-overlapping books."""
    tiers: Dict[str, List[Book]] = {tier: [] for tier in TIER_ORDER}
    for candidate in candidates:
        if candidate.id == source.id:
            continue
        tier = match_tier(genre_match_count(candidate.genres, source.genres))
        if tier is not None:
            tiers[tier].append(candidate)
    return tiers


def pick_recommendations(
    source: Book,
    candidates: Sequence[Book],
    limit: int,
    rng: Optional[random.Random] = None,
) -> List[Book]:
    """
    Sample up to `limit` books from each tier, then take the first `limit`
    in high -> medium -> low order. Order inside a tier is random.
    """
    rng = rng or random
    tiers = partition_by_tier(source, candidates)
    picked: List[Book] = []
    for tier in TIER_ORDER:
        books = tiers[tier]
        picked.extend(rng.sample(books, min(limit, len(books))))
    return picked[:limit]


def get_recommended_books(
    db: Session,
    book: Book,
    limit: Optional[int] = None,
    cache: Optional[TTLCache] = None,
    rng: Optional[random.Random] = None,
) -> List[BookResponse]:
    """
    Recommended books for a book page, cached per source book id.

    A cache hit returns the previously sampled set without touching the
    database. The cache is never invalidated on catalog changes.
    """
    if limit is None:
        limit = settings.RECOMMENDATION_LIMIT
    cache = cache if cache is not None else _recommendation_cache
    cache_key = str(book.id)

    cached = cache.get(cache_key)
    if cached is not None:
        logger.debug("Recommendation cache hit for book %s", cache_key)
        return cached

    source_genres = book.genres or []
    if not source_genres:
        result: List[BookResponse] = []
    else:
        candidates = db.query(Book).filter(Book.id != book.id).all()
        picked = pick_recommendations(book, candidates, limit, rng=rng)
        result = [BookResponse.from_book(b) for b in picked]

    logger.info("Computed %d recommendations for book %s", len(result), cache_key)
    cache.set(cache_key, result)
    return result


# ----------------------------
# Discovery picks
# ----------------------------

def random_books(db: Session, limit: int = DISCOVERY_LIMIT, rng: Optional[random.Random] = None) -> List[Book]:
    rng = rng or random
    books = db.query(Book).all()
    return rng.sample(books, min(limit, len(books)))


def popular_books(db: Session, limit: int = DISCOVERY_LIMIT, rng: Optional[random.Random] = None) -> List[Book]:
    """Randomly pick `limit` books among the top 2*limit rated books."""
    rng = rng or random
    top = (
        db.query(Book)
        .filter(Book.rating > 0)
        .order_by(Book.rating.desc(), Book.ratings_count.desc())
        .limit(limit * 2)
        .all()
    )
    return rng.sample(top, min(limit, len(top)))


def books_by_moods(
    db: Session,
    moods: Optional[Sequence[str]] = None,
    limit: int = DISCOVERY_LIMIT,
    rng: Optional[random.Random] = None,
) -> List[Book]:
    """
    Books sharing at least one of the moods, ranked by number of shared moods
    then rating; `limit` are sampled from the best 2*limit.
    """
    rng = rng or random
    wanted = set(moods or DEFAULT_MOODS)
    scored = []
    for book in db.query(Book).all():
        shared = len(set(book.moods or []) & wanted)
        if shared:
            scored.append((shared, book.rating or 0, book))
    scored.sort(key=lambda item: (item[0], item[1]), reverse=True)
    top = [book for _, _, book in scored[: limit * 2]]
    return rng.sample(top, min(limit, len(top)))
