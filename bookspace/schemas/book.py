from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from bookspace.models import ReadingStatus


class CoverImage(BaseModel):
    url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class BookResponse(BaseModel):
    id: str
    title: str
    author: List[str]
    description: str
    release_year: int
    slug: str
    page_count: int
    rating: float
    ratings_count: int
    tags: List[str]
    moods: List[str]
    genres: List[str]
    cover_image: CoverImage
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_book(cls, book) -> "BookResponse":
        return cls(
            id=str(book.id),
            title=book.title,
            author=book.author or [],
            description=book.description,
            release_year=book.release_year,
            slug=book.slug,
            page_count=book.page_count,
            rating=book.rating or 0,
            ratings_count=book.ratings_count or 0,
            tags=book.tags or [],
            moods=book.moods or [],
            genres=book.genres or [],
            cover_image=CoverImage(
                url=book.cover_image_url,
                width=book.cover_image_width,
                height=book.cover_image_height,
            ),
            created_at=book.created_at,
            updated_at=book.updated_at,
        )


class BookCreate(BaseModel):
    title: str
    author: List[str] = Field(..., min_length=1)
    description: str
    release_year: int
    slug: str
    page_count: int = Field(..., gt=0)
    tags: List[str] = []
    moods: List[str] = []
    genres: List[str] = Field(..., min_length=1)
    cover_image: Optional[CoverImage] = None


class CollectionState(BaseModel):
    in_collection: bool
    is_bookmarked: bool
    reading_status: ReadingStatus
    progress: int = 0


class BookDetailResponse(BaseModel):
    book: BookResponse
    collection: CollectionState
    recommended_books: List[BookResponse]
    user_has_reviewed: bool = False


class RecommendedBooksResponse(BaseModel):
    book_id: UUID
    items: List[BookResponse]
