from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from bookspace.models import ReadingStatus
from bookspace.schemas.book import BookResponse


class BookmarkResponse(BaseModel):
    is_bookmarked: bool
    reading_status: ReadingStatus
    in_collection: bool


class ReadingSessionCreate(BaseModel):
    minutes_read: int = 0
    page_number: int = 0


class ReadingSessionResponse(BaseModel):
    id: str
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    pages_read: int
    minutes_read: int


class ReadingSessionResult(BaseModel):
    book_id: str
    progress: int
    reading_status: ReadingStatus
    session: ReadingSessionResponse


class ReadingSessionForm(BaseModel):
    book: BookResponse
    initial_page_number: int


class CollectionBook(BaseModel):
    book: BookResponse
    progress: int
    status: ReadingStatus
    is_bookmarked: bool
