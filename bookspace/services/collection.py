"""
Book collection service: bookmarks, "start reading", reading sessions and the
shelf listings built from a user's collection entries.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.orm import Session, joinedload
from bookspace.models import Book, BookCollectionEntry, ReadingSession, ReadingStatus, User
from bookspace.schemas.book import CollectionState
from bookspace.services.errors import NotFoundError, ValidationFailed

logger = logging.getLogger(__name__)


def get_book_or_404(db: Session, book_id: UUID) -> Book:
    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise NotFoundError("Book", book_id)
    return book


def find_entry(db: Session, user: User, book_id: UUID) -> Optional[BookCollectionEntry]:
    return db.query(BookCollectionEntry).filter(
        BookCollectionEntry.user_id == user.id,
        BookCollectionEntry.book_id == book_id,
    ).first()


def collection_state(entry: Optional[BookCollectionEntry]) -> CollectionState:
    if entry is None:
        return CollectionState(
            in_collection=False,
            is_bookmarked=False,
            reading_status=ReadingStatus.NOT_STARTED,
            progress=0,
        )
    return CollectionState(
        in_collection=True,
        is_bookmarked=bool(entry.is_bookmarked),
        reading_status=entry.status,
        progress=entry.progress or 0,
    )


def is_removable(entry: BookCollectionEntry) -> bool:
    """An un-bookmarked entry with no reading activity drops out of the collection."""
    return (
        not entry.is_bookmarked
        and entry.status == ReadingStatus.NOT_STARTED
        and (entry.progress or 0) == 0
        and not entry.reading_sessions
    )


def toggle_bookmark(db: Session, user: User, book_id: UUID) -> CollectionState:
    book = get_book_or_404(db, book_id)
    entry = find_entry(db, user, book.id)

    if entry is None:
        entry = BookCollectionEntry(
            user_id=user.id,
            book_id=book.id,
            progress=0,
            is_bookmarked=True,
            status=ReadingStatus.NOT_STARTED,
        )
        db.add(entry)
    else:
        entry.is_bookmarked = not entry.is_bookmarked
        if is_removable(entry):
            logger.info("Removing book %s from collection of user %s", book.id, user.id)
            db.delete(entry)
            db.commit()
            return collection_state(None)

    db.commit()
    db.refresh(entry)
    return collection_state(entry)


def set_currently_reading(db: Session, user: User, book_id: UUID) -> CollectionState:
    book = get_book_or_404(db, book_id)
    entry = find_entry(db, user, book.id)

    if entry is None:
        entry = BookCollectionEntry(
            user_id=user.id,
            book_id=book.id,
            progress=0,
            is_bookmarked=False,
            status=ReadingStatus.READING,
        )
        db.add(entry)
    else:
        entry.status = ReadingStatus.READING

    db.commit()
    db.refresh(entry)
    return collection_state(entry)


def session_form_defaults(db: Session, user: User, book_id: UUID) -> Tuple[Book, int]:
    """The book and the page to pre-fill: current progress, or 1 with none."""
    book = get_book_or_404(db, book_id)
    entry = find_entry(db, user, book.id)
    current_page = entry.progress if entry is not None and entry.progress else 0
    return book, current_page if current_page > 0 else 1


def record_reading_session(
    db: Session,
    user: User,
    book_id: UUID,
    minutes_read: int,
    page_number: int,
    now: Optional[datetime] = None,
) -> Tuple[BookCollectionEntry, ReadingSession]:
    """
    Append a reading session and move the bookmark to page_number.

    The session is back-dated: start_time = now - minutes_read. pages_read is
    the delta against the previous progress (the page number itself for a
    book that wasn't in the collection yet).
    """
    now = now or datetime.utcnow()
    book = get_book_or_404(db, book_id)

    errors = {}
    start_time = None
    if minutes_read < 0:
        errors["minutes_read"] = "Minutes read cannot be negative"
    else:
        try:
            start_time = now - timedelta(minutes=minutes_read)
        except OverflowError:
            errors["minutes_read"] = "Minutes read is too large"
    if page_number < 0:
        errors["page_number"] = "Page number cannot be negative"
    elif book.page_count and page_number > book.page_count:
        errors["page_number"] = f"Page number cannot be greater than {book.page_count}"
    if errors:
        raise ValidationFailed(errors)

    entry = find_entry(db, user, book.id)
    if entry is None:
        entry = BookCollectionEntry(
            user_id=user.id,
            book_id=book.id,
            progress=0,
            is_bookmarked=False,
            status=ReadingStatus.NOT_STARTED,
        )
        db.add(entry)
        previous_progress = 0
    else:
        previous_progress = entry.progress or 0

    session = ReadingSession(
        start_time=start_time,
        end_time=now,
        pages_read=page_number - previous_progress,
        minutes_read=minutes_read,
    )
    entry.reading_sessions.append(session)
    entry.progress = page_number
    if book.page_count and page_number >= book.page_count:
        entry.status = ReadingStatus.FINISHED
    else:
        entry.status = ReadingStatus.READING

    db.commit()
    db.refresh(entry)
    db.refresh(session)

    logger.info(
        "Recorded reading session for user %s book %s: %s min, page %s -> %s",
        user.id,
        book.id,
        minutes_read,
        previous_progress,
        page_number,
    )
    return entry, session


def list_collection(
    db: Session,
    user: User,
    status: Optional[ReadingStatus] = None,
    bookmarked_only: bool = False,
) -> List[BookCollectionEntry]:
    query = (
        db.query(BookCollectionEntry)
        .options(joinedload(BookCollectionEntry.book))
        .filter(BookCollectionEntry.user_id == user.id)
    )
    if status is not None:
        query = query.filter(BookCollectionEntry.status == status)
    if bookmarked_only:
        query = query.filter(BookCollectionEntry.is_bookmarked.is_(True))
    return query.order_by(BookCollectionEntry.updated_at.desc()).all()
