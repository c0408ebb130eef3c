"""API tests for bookmarks, reading sessions and the user's shelves."""
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from bookspace.models import Book, BookCollectionEntry, ReadingStatus


@pytest.fixture
def book(make_book) -> Book:
    return make_book("Tracked Book", page_count=200)


def _entry(db: Session, user, book):
    return db.query(BookCollectionEntry).filter(
        BookCollectionEntry.user_id == user.id,
        BookCollectionEntry.book_id == book.id,
    ).first()


def _record(client, book_id, minutes, page):
    return client.post(
        f"/api/books/{book_id}/reading-sessions",
        json={"minutes_read": minutes, "page_number": page},
    )


# ----------------------------
# Bookmarks
# ----------------------------

def test_bookmark_adds_book_to_collection(client, db: Session, user, book):
    response = client.post(f"/api/books/{book.id}/bookmark")

    assert response.status_code == 200
    assert response.json() == {
        "is_bookmarked": True,
        "reading_status": "not_started",
        "in_collection": True,
    }
    assert _entry(db, user, book) is not None


def test_unbookmarking_untouched_book_removes_it(client, db: Session, user, book):
    client.post(f"/api/books/{book.id}/bookmark")

    response = client.post(f"/api/books/{book.id}/bookmark")

    assert response.json() == {
        "is_bookmarked": False,
        "reading_status": "not_started",
        "in_collection": False,
    }
    assert _entry(db, user, book) is None
    assert client.get("/api/me/books").json() == []


def test_unbookmarking_book_being_read_keeps_it(client, db: Session, user, book):
    client.post(f"/api/books/{book.id}/bookmark")
    client.post(f"/api/books/{book.id}/start-reading")

    response = client.post(f"/api/books/{book.id}/bookmark")

    assert response.json() == {
        "is_bookmarked": False,
        "reading_status": "reading",
        "in_collection": True,
    }
    assert _entry(db, user, book) is not None


def test_unbookmarking_book_with_sessions_keeps_it(client, db: Session, user, book):
    _record(client, book.id, minutes=10, page=5)
    client.post(f"/api/books/{book.id}/bookmark")

    response = client.post(f"/api/books/{book.id}/bookmark")

    assert response.json()["in_collection"] is True
    assert response.json()["is_bookmarked"] is False


def test_bookmark_unknown_book_is_404(client):
    assert client.post(f"/api/books/{uuid4()}/bookmark").status_code == 404


def test_start_reading_new_book(client, book):
    response = client.post(f"/api/books/{book.id}/start-reading")

    assert response.status_code == 200
    assert response.json() == {
        "is_bookmarked": False,
        "reading_status": "reading",
        "in_collection": True,
    }


# ----------------------------
# Reading sessions
# ----------------------------

def test_session_form_defaults_to_page_one(client, book):
    response = client.get(f"/api/books/{book.id}/reading-sessions/new")

    assert response.status_code == 200
    assert response.json()["initial_page_number"] == 1
    assert response.json()["book"]["id"] == str(book.id)


def test_session_form_defaults_to_current_progress(client, book):
    _record(client, book.id, minutes=30, page=42)

    response = client.get(f"/api/books/{book.id}/reading-sessions/new")

    assert response.json()["initial_page_number"] == 42


def test_record_first_session(client, book):
    response = _record(client, book.id, minutes=30, page=50)

    assert response.status_code == 201
    data = response.json()
    assert data["book_id"] == str(book.id)
    assert data["progress"] == 50
    assert data["reading_status"] == "reading"
    assert data["session"]["pages_read"] == 50
    assert data["session"]["minutes_read"] == 30
    assert data["session"]["start_time"].startswith("2024-05-15T11:30:00")
    assert data["session"]["end_time"].startswith("2024-05-15T12:00:00")


def test_pages_read_is_delta_from_previous_progress(client, db: Session, user, book):
    _record(client, book.id, minutes=30, page=50)

    response = _record(client, book.id, minutes=20, page=120)

    assert response.json()["session"]["pages_read"] == 70
    assert response.json()["progress"] == 120
    entry = _entry(db, user, book)
    db.refresh(entry)
    assert [s.pages_read for s in entry.reading_sessions] == [50, 70]


def test_reaching_last_page_finishes_book(client, book):
    _record(client, book.id, minutes=30, page=150)

    response = _record(client, book.id, minutes=25, page=200)

    assert response.json()["reading_status"] == "finished"
    assert response.json()["session"]["pages_read"] == 50


def test_page_beyond_page_count_is_rejected(client, db: Session, user, book):
    response = _record(client, book.id, minutes=10, page=201)

    assert response.status_code == 400
    assert response.json()["errors"]["page_number"] == "Page number cannot be greater than 200"
    assert _entry(db, user, book) is None


def test_negative_values_are_rejected(client, book):
    response = _record(client, book.id, minutes=-5, page=-1)

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert "minutes_read" in errors
    assert "page_number" in errors


def test_minutes_reaching_before_calendar_start_are_rejected(client, db: Session, user, book):
    response = _record(client, book.id, minutes=2_000_000_000, page=10)

    assert response.status_code == 400
    assert response.json()["errors"] == {"minutes_read": "Minutes read is too large"}
    assert _entry(db, user, book) is None


def test_session_for_unknown_book_is_404(client):
    assert _record(client, uuid4(), minutes=10, page=1).status_code == 404


# ----------------------------
# Shelves
# ----------------------------

def test_shelves(client, make_book):
    bookmarked = make_book("Bookmarked", page_count=100)
    reading = make_book("Reading", page_count=100)
    finished = make_book("Finished", page_count=100)

    client.post(f"/api/books/{bookmarked.id}/bookmark")
    _record(client, reading.id, minutes=15, page=20)
    _record(client, finished.id, minutes=60, page=100)

    all_books = client.get("/api/me/books").json()
    assert {b["book"]["title"] for b in all_books} == {"Bookmarked", "Reading", "Finished"}

    bookmarks = client.get("/api/me/bookmarks").json()
    assert [b["book"]["title"] for b in bookmarks] == ["Bookmarked"]
    assert bookmarks[0]["is_bookmarked"] is True

    current = client.get("/api/me/currently-reading").json()
    assert [b["book"]["title"] for b in current] == ["Reading"]
    assert current[0]["progress"] == 20

    done = client.get("/api/me/books", params={"status": ReadingStatus.FINISHED.value}).json()
    assert [b["book"]["title"] for b in done] == ["Finished"]


def test_shelves_are_per_user(client, auth, other_user, book):
    client.post(f"/api/books/{book.id}/bookmark")
    auth["user"] = other_user

    assert client.get("/api/me/bookmarks").json() == []
