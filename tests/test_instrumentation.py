"""Tests for server-side event logging."""
import pytest
from sqlalchemy.orm import Session

from bookspace.models import BookCollectionEntry, EventLog, ReadingSession
from bookspace.utils import instrumentation
from bookspace.utils.instrumentation import log_event


@pytest.fixture
def failing_event_log(monkeypatch):
    """Make every event row violate NOT NULL on event_name so its flush fails."""

    def _broken(**kwargs):
        kwargs["event_name"] = None
        return EventLog(**kwargs)

    monkeypatch.setattr(instrumentation, "EventLog", _broken)


def test_log_event_persists_row(db: Session, user):
    log_event(db, "reading_goal_set", user_id=user.id, properties={"target": 30})
    db.commit()

    event = db.query(EventLog).filter(EventLog.event_name == "reading_goal_set").one()
    assert event.user_id == user.id
    assert event.properties == {"target": 30}


def test_failed_insert_leaves_session_usable(db: Session, user, failing_event_log, caplog):
    log_event(db, "reading_goal_set", user_id=user.id)

    db.commit()
    assert db.query(EventLog).count() == 0
    assert "Failed to log event" in caplog.text


def test_request_succeeds_when_event_insert_fails(client, db: Session, user, make_book, failing_event_log):
    book = make_book("Logged", page_count=100)

    response = client.post(
        f"/api/books/{book.id}/reading-sessions",
        json={"minutes_read": 15, "page_number": 20},
    )

    assert response.status_code == 201
    assert db.query(EventLog).count() == 0
    entry = db.query(BookCollectionEntry).filter(BookCollectionEntry.user_id == user.id).one()
    assert entry.progress == 20
    assert db.query(ReadingSession).filter(ReadingSession.entry_id == entry.id).count() == 1
