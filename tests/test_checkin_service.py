"""
Tests for event-day check-in
"""

import asyncio
import pytest

from seatplan.core.db import Base, make_engine, make_session_factory
from seatplan.editor.layout import Layout, create_table
from seatplan.models import GuestCheckIn
from seatplan.services.checkin_service import CheckInService
from seatplan.services.errors import AlreadyCheckedInError, NoTableAssignedError, NotCheckedInError
from seatplan.services.guest_directory import GuestEntry

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_checkin.db"
engine = make_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = make_session_factory(engine)

class RecordingManager:
    """Stands in for the WebSocket manager and keeps what was broadcast"""

    def __init__(self):
        self.messages = []

    async def broadcast_to_room(self, room, message):
        self.messages.append((room, message))

@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def layout():
    layout = Layout([create_table(3, 300, 300), create_table(8, 600, 300)])
    layout.assign_seat(3, 0, "Alice Tan")
    layout.assign_seat(8, 5, "Carol")
    return layout

@pytest.fixture
def manager():
    return RecordingManager()

@pytest.fixture
def service(manager):
    return CheckInService(manager)

def test_check_in_records_table_and_broadcasts(db_session, layout, service, manager):
    entry = asyncio.run(service.check_in_guest(db_session, " alice tan ", layout, checked_in_by="admin"))
    assert entry.table_number == 3
    assert entry.checked_in_by == "admin"
    assert entry.checked_out_at is None
    assert service.is_checked_in(db_session, "ALICE TAN")

    room, message = manager.messages[0]
    assert room == "checkin"
    assert message["type"] == "checkin"
    assert message["guest"]["table_number"] == 3

def test_check_in_without_table_is_rejected(db_session, layout, service):
    """No table assignment means no row is written"""
    with pytest.raises(NoTableAssignedError):
        asyncio.run(service.check_in_guest(db_session, "Bob Lim", layout, checked_in_by="admin"))
    assert db_session.query(GuestCheckIn).count() == 0

def test_check_in_blank_name(db_session, layout, service):
    with pytest.raises(ValueError):
        asyncio.run(service.check_in_guest(db_session, "  ", layout, checked_in_by="admin"))

def test_double_check_in_is_rejected(db_session, layout, service):
    asyncio.run(service.check_in_guest(db_session, "Alice Tan", layout, checked_in_by="admin"))
    with pytest.raises(AlreadyCheckedInError):
        asyncio.run(service.check_in_guest(db_session, "alice tan", layout, checked_in_by="admin"))
    assert db_session.query(GuestCheckIn).count() == 1

def test_check_out_and_back_in(db_session, layout, service, manager):
    asyncio.run(service.check_in_guest(db_session, "Carol", layout, checked_in_by="admin"))
    entry = asyncio.run(service.check_out_guest(db_session, "carol"))
    assert entry.checked_out_at is not None
    assert not service.is_checked_in(db_session, "Carol")
    assert manager.messages[-1][1]["type"] == "checkout"

    asyncio.run(service.check_in_guest(db_session, "Carol", layout, checked_in_by="desk 2"))
    assert service.is_checked_in(db_session, "Carol")
    assert service.checked_in_names(db_session) == {"carol"}
    assert len(service.log(db_session)) == 2
    assert service.log(db_session, limit=1)[0].checked_in_by == "desk 2"

def test_check_out_when_not_checked_in(db_session, service):
    with pytest.raises(NotCheckedInError):
        asyncio.run(service.check_out_guest(db_session, "Alice Tan"))

def test_roster(db_session, layout, service):
    entries = [
        GuestEntry(name="Alice Tan", email="alice@example.com", kind="invited", invited_by="Alice Tan"),
        GuestEntry(name="Bob Lim", email="bob@example.com", kind="invited", invited_by="Bob Lim"),
        GuestEntry(name="Carol", email="carol@example.com", kind="guest", invited_by="Alice Tan"),
    ]
    asyncio.run(service.check_in_guest(db_session, "Carol", layout, checked_in_by="admin"))

    roster = service.roster(db_session, entries, layout)
    assert roster["total_guests"] == 3
    assert roster["assigned_guests"] == 2
    assert roster["checked_in_guests"] == 1
    assert [(g["name"], g["table_number"], g["checked_in"]) for g in roster["guests"]] == [
        ("Alice Tan", 3, False),
        ("Bob Lim", None, False),
        ("Carol", 8, True),
    ]

    filtered = service.roster(db_session, entries, layout, search="li")
    assert [g["name"] for g in filtered["guests"]] == ["Alice Tan", "Bob Lim"]
