from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, Float, ForeignKey, JSON, Uuid, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
import sqlalchemy as sa
from bookspace.database import Base


class ReadingStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    READING = "reading"
    FINISHED = "finished"


class GoalType(str, enum.Enum):
    MINUTES = "minutes"
    HOURS = "hours"
    PAGES = "pages"
    BOOKS = "books"


class GoalFrequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def _enum_values(enum_cls):
    return [e.value for e in enum_cls]


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    auth_user_id = Column(String, unique=True, index=True, nullable=False)  # identity provider "sub"
    email = Column(String, index=True, nullable=True)
    name = Column(String, nullable=True)
    image = Column(String, nullable=True)
    favorite_genres = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    book_collection = relationship(
        "BookCollectionEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="BookCollectionEntry.created_at",
    )
    reading_goal = relationship(
        "ReadingGoal",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    reviews = relationship("Review", back_populates="user")


class Book(Base):
    __tablename__ = "books"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False, index=True)
    author = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=False)
    release_year = Column(Integer, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    page_count = Column(Integer, nullable=False)
    # Derived from reviews, see services.ratings.recompute_book_rating
    rating = Column(Float, nullable=False, default=0)
    ratings_count = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)
    moods = Column(JSON, nullable=False, default=list)
    genres = Column(JSON, nullable=False, default=list)
    cover_image_url = Column(String, nullable=True)
    cover_image_width = Column(Integer, nullable=True)
    cover_image_height = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    reviews = relationship("Review", back_populates="book", cascade="all, delete-orphan")


class BookCollectionEntry(Base):
    """
    A user's tracking record for one book: bookmark flag, last page read,
    reading status and the append-only list of reading sessions.
    """
    __tablename__ = "book_collection_entries"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(Uuid(as_uuid=True), ForeignKey("books.id"), nullable=False, index=True)
    progress = Column(Integer, nullable=False, default=0)
    is_bookmarked = Column(Boolean, nullable=False, default=False)
    status = Column(
        SQLEnum(
            ReadingStatus,
            name="readingstatus",
            values_callable=_enum_values,
        ),
        nullable=False,
        default=ReadingStatus.NOT_STARTED,
    )
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="book_collection")
    book = relationship("Book")
    reading_sessions = relationship(
        "ReadingSession",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="ReadingSession.created_at",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_book_collection_user_book"),
    )


class ReadingSession(Base):
    __tablename__ = "reading_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    entry_id = Column(Uuid(as_uuid=True), ForeignKey("book_collection_entries.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=True, index=True)
    end_time = Column(DateTime, nullable=True)
    pages_read = Column(Integer, nullable=False, default=0)
    minutes_read = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    entry = relationship("BookCollectionEntry", back_populates="reading_sessions")


class ReadingGoal(Base):
    """Single, non-historized reading goal per user."""
    __tablename__ = "reading_goals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), unique=True, nullable=False)
    type = Column(
        SQLEnum(GoalType, name="goaltype", values_callable=_enum_values),
        nullable=False,
        default=GoalType.MINUTES,
    )
    frequency = Column(
        SQLEnum(GoalFrequency, name="goalfrequency", values_callable=_enum_values),
        nullable=False,
        default=GoalFrequency.DAILY,
    )
    target = Column(Float, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="reading_goal")


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    book_id = Column(Uuid(as_uuid=True), ForeignKey("books.id"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    book = relationship("Book", back_populates="reviews")
    user = relationship("User", back_populates="reviews")


class EventLog(Base):
    __tablename__ = "event_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    event_name = Column(String, nullable=False, index=True)
    properties = Column(JSON, nullable=True)
    request_id = Column(String, nullable=True)
    session_id = Column(String, nullable=True)
