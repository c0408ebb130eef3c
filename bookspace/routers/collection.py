"""
Book collection endpoints: bookmarks, "start reading", reading sessions and
the user's shelves (my books, bookmarks, currently reading).
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional, List
from uuid import UUID
from datetime import datetime
import logging

from bookspace.database import get_db
from bookspace.core.auth import get_current_user
from bookspace.models import User, ReadingStatus
from bookspace.schemas.book import BookResponse
from bookspace.schemas.collection import (
    BookmarkResponse,
    CollectionBook,
    ReadingSessionCreate,
    ReadingSessionForm,
    ReadingSessionResponse,
    ReadingSessionResult,
)
from bookspace.services import collection
from bookspace.utils.instrumentation import log_event
from bookspace.utils.timing import current_time

logger = logging.getLogger(__name__)
router = APIRouter(tags=["collection"])


def _bookmark_response(state) -> BookmarkResponse:
    return BookmarkResponse(
        is_bookmarked=state.is_bookmarked,
        reading_status=state.reading_status,
        in_collection=state.in_collection,
    )


def _collection_books(entries) -> List[CollectionBook]:
    return [
        CollectionBook(
            book=BookResponse.from_book(entry.book),
            progress=entry.progress or 0,
            status=entry.status,
            is_bookmarked=bool(entry.is_bookmarked),
        )
        for entry in entries
        if entry.book is not None
    ]


@router.post("/books/{book_id}/bookmark", response_model=BookmarkResponse)
async def toggle_bookmark(
    book_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Toggle the bookmark on a book.

    Adds the book to the collection when it isn't there yet. Removing the
    bookmark from a book that was never started drops it from the collection.
    """
    state = collection.toggle_bookmark(db, user, book_id)
    return _bookmark_response(state)


@router.post("/books/{book_id}/start-reading", response_model=BookmarkResponse)
async def start_reading(
    book_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    state = collection.set_currently_reading(db, user, book_id)
    return _bookmark_response(state)


@router.get("/books/{book_id}/reading-sessions/new", response_model=ReadingSessionForm)
async def new_reading_session(
    book_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Defaults for the finish-reading form: the book and the page to pre-fill."""
    book, initial_page = collection.session_form_defaults(db, user, book_id)
    return ReadingSessionForm(book=BookResponse.from_book(book), initial_page_number=initial_page)


@router.post(
    "/books/{book_id}/reading-sessions",
    response_model=ReadingSessionResult,
    status_code=status.HTTP_201_CREATED,
)
async def record_reading_session(
    book_id: UUID,
    payload: ReadingSessionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(current_time),
):
    entry, session = collection.record_reading_session(
        db,
        user,
        book_id,
        minutes_read=payload.minutes_read,
        page_number=payload.page_number,
        now=now,
    )

    log_event(
        db=db,
        event_name="reading_session_recorded",
        user_id=user.id,
        properties={
            "book_id": str(book_id),
            "minutes_read": session.minutes_read,
            "pages_read": session.pages_read,
            "progress": entry.progress,
            "status": entry.status.value,
        },
    )
    db.commit()

    return ReadingSessionResult(
        book_id=str(entry.book_id),
        progress=entry.progress,
        reading_status=entry.status,
        session=ReadingSessionResponse(
            id=str(session.id),
            start_time=session.start_time,
            end_time=session.end_time,
            pages_read=session.pages_read,
            minutes_read=session.minutes_read,
        ),
    )


@router.get("/me/books", response_model=List[CollectionBook])
async def get_my_books(
    status_filter: Optional[ReadingStatus] = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Every book in the user's collection with progress, status and bookmark flag."""
    return _collection_books(collection.list_collection(db, user, status=status_filter))


@router.get("/me/bookmarks", response_model=List[CollectionBook])
async def get_my_bookmarks(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _collection_books(collection.list_collection(db, user, bookmarked_only=True))


@router.get("/me/currently-reading", response_model=List[CollectionBook])
async def get_currently_reading(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _collection_books(collection.list_collection(db, user, status=ReadingStatus.READING))
