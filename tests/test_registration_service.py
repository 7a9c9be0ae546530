"""
Tests for invitation lookup, registration and the guest directory
"""

import pytest

from seatplan.core.db import Base, make_engine, make_session_factory
from seatplan.editor.layout import Layout, create_table
from seatplan.models import GuestRegistration, InvitedGuest
from seatplan.schemas.guest import PlusOne
from seatplan.services.errors import GuestValidationError, NotInvitedError, RegistrationClosedError
from seatplan.services.guest_directory import attach_tables, filter_guests, load_guest_directory, unassigned_guests
from seatplan.services.registration_service import RegistrationService

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_registration.db"
engine = make_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = make_session_factory(engine)

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
def invitations(db_session):
    """Two invited guests: one may bring two people, one may not bring anyone"""
    created, updated = RegistrationService.upsert_invitations(db_session, [
        {"name": "Alice Tan", "email": "Alice@Example.com", "max_guests": 2},
        {"name": "Bob Lim", "email": "bob@example.com", "max_guests": 0},
    ])
    assert (created, updated) == (2, 0)
    return db_session

def test_rsvp_defaults_to_open(db_session):
    assert RegistrationService.get_rsvp_settings(db_session).is_open is True

def test_lookup_is_case_insensitive(invitations):
    invited, registration = RegistrationService.lookup(invitations, "  ALICE@example.COM ")
    assert invited.name == "Alice Tan"
    assert invited.email == "alice@example.com"
    assert registration is None

def test_lookup_unknown_email(invitations):
    with pytest.raises(NotInvitedError):
        RegistrationService.lookup(invitations, "stranger@example.com")
    with pytest.raises(NotInvitedError):
        RegistrationService.lookup(invitations, "   ")

def test_lookup_when_rsvp_closed(invitations):
    RegistrationService.set_rsvp_open(invitations, False)
    with pytest.raises(RegistrationClosedError):
        RegistrationService.lookup(invitations, "alice@example.com")

def test_register_with_plus_ones(invitations):
    """Blank plus-one rows are ignored"""
    registration, created = RegistrationService.register(invitations, "alice@example.com", True, [
        PlusOne(name="Carol", email="Carol@Example.com"),
        PlusOne(name="   ", email=None),
    ])
    assert created is True
    assert registration.will_attend is True
    assert registration.modified_after_initial is False
    assert [(g.guest_name, g.guest_email) for g in registration.guests] == [("Carol", "carol@example.com")]

def test_register_too_many_guests(invitations):
    with pytest.raises(GuestValidationError) as exc_info:
        RegistrationService.register(invitations, "bob@example.com", True, [PlusOne(name="Dan", email="dan@example.com")])
    assert exc_info.value.errors == ["You can bring up to 0 guests"]
    assert invitations.query(GuestRegistration).count() == 0

def test_register_plus_one_needs_email(invitations):
    with pytest.raises(GuestValidationError) as exc_info:
        RegistrationService.register(invitations, "alice@example.com", True, [PlusOne(name="Carol")])
    assert "Carol" in exc_info.value.errors[0]

def test_update_registration_replaces_guests(invitations):
    RegistrationService.register(invitations, "alice@example.com", True, [
        PlusOne(name="Carol", email="carol@example.com"),
        PlusOne(name="Dan", email="dan@example.com"),
    ])
    registration, created = RegistrationService.register(invitations, "alice@example.com", True, [
        PlusOne(name="Erin", email="erin@example.com"),
    ])
    assert created is False
    assert registration.modified_after_initial is True
    assert [g.guest_name for g in registration.guests] == ["Erin"]
    assert invitations.query(GuestRegistration).count() == 1

def test_attendee_list_only_attending(invitations):
    RegistrationService.register(invitations, "alice@example.com", True, [PlusOne(name="Carol", email="carol@example.com")])
    RegistrationService.register(invitations, "bob@example.com", False, [])

    attendees = RegistrationService.attendee_list(invitations)
    assert [(a["name"], a["is_primary"], a["primary_guest"]) for a in attendees] == [
        ("Alice Tan", True, "Alice Tan"),
        ("Carol", False, "Alice Tan"),
    ]

    registrations = RegistrationService.list_registrations(invitations)
    assert len(registrations) == 2
    assert registrations[1]["invited_guest"]["email"] == "bob@example.com"

def test_upsert_invitations_updates_existing(invitations):
    created, updated = RegistrationService.upsert_invitations(invitations, [
        {"name": "Alice T.", "email": "alice@example.com", "max_guests": 4},
        {"name": "Fay", "email": "fay@example.com", "max_guests": 1},
    ])
    assert (created, updated) == (1, 1)
    alice = invitations.query(InvitedGuest).filter(InvitedGuest.email == "alice@example.com").one()
    assert (alice.name, alice.max_guests) == ("Alice T.", 4)

def test_guest_directory(invitations):
    """Attending invited guests and their plus-ones, sorted by name"""
    RegistrationService.register(invitations, "alice@example.com", True, [PlusOne(name="Carol", email="carol@example.com")])
    RegistrationService.register(invitations, "bob@example.com", False, [])

    entries = load_guest_directory(invitations)
    assert [(e.name, e.kind, e.invited_by) for e in entries] == [
        ("Alice Tan", "invited", "Alice Tan"),
        ("Carol", "guest", "Alice Tan"),
    ]
    assert len(load_guest_directory(invitations, attending_only=False)) == 3

    layout = Layout([create_table(4, 300, 300)])
    layout.assign_seat(4, 2, "carol ")
    attach_tables(entries, layout)
    assert [e.table_number for e in entries] == [None, 4]
    assert [e.name for e in unassigned_guests(entries, layout)] == ["Alice Tan"]
    assert [e.name for e in filter_guests(entries, "CAR")] == ["Carol"]
