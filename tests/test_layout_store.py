"""
Tests for the SQL layout store
"""

import pytest

from seatplan.core.config import Settings
from seatplan.core.db import Base, make_engine, make_session_factory
from seatplan.editor.layout import create_table
from seatplan.models import SeatAssignment, TableConfiguration
from seatplan.services.layout_store import SqlLayoutStore, build_table, get_layout_store

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_layout_store.db"
engine = make_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = make_session_factory(engine)

@pytest.fixture
def store():
    """Store over a fresh database"""
    Base.metadata.create_all(bind=engine)
    try:
        yield SqlLayoutStore(TestingSessionLocal)
    finally:
        Base.metadata.drop_all(bind=engine)

def seat_row_ids(table_number):
    with TestingSessionLocal() as db:
        config = db.query(TableConfiguration).filter(TableConfiguration.table_number == table_number).one()
        return {row.seat_index: row.id for row in config.seats}

def test_save_and_load_round_trip(store):
    table = create_table(3, 420, 260, seat_count=8, label="Family")
    table.seats[2].guest_name = "Alice Tan"
    table.seats[2].tag = "vip"
    table.seats[2].note = "vegetarian"
    store.save_table(table)

    loaded = store.load_tables()
    assert len(loaded) == 1
    restored = loaded[0]
    assert restored.number == 3
    assert restored.label == "Family"
    assert (restored.x, restored.y) == (420, 260)
    assert restored.seat_count == 8
    assert [seat.angle for seat in restored.seats] == pytest.approx([45 * i for i in range(8)])
    assert restored.seats[2].guest_name == "Alice Tan"
    assert restored.seats[2].tag == "vip"
    assert restored.seats[2].note == "vegetarian"
    assert restored.seats[0].guest_name is None

def test_load_orders_by_number(store):
    for number in (5, 1, 3):
        store.save_table(create_table(number, 300, 300))
    assert [table.number for table in store.load_tables()] == [1, 3, 5]

def test_save_updates_rows_in_place(store):
    """Seat rows are diffed by index, not deleted and rewritten"""
    table = create_table(1, 300, 300, seat_count=6)
    store.save_table(table)
    before = seat_row_ids(1)

    table.remove_seat()
    table.remove_seat()
    table.seats[0].guest_name = "Bob"
    store.save_table(table)
    after = seat_row_ids(1)

    assert sorted(after) == [0, 1, 2, 3]
    assert all(after[index] == before[index] for index in after)
    with TestingSessionLocal() as db:
        assert db.query(SeatAssignment).count() == 4

    loaded = store.load_tables()[0]
    assert loaded.seat_count == 4
    assert loaded.seats[0].guest_name == "Bob"
    assert [seat.angle for seat in loaded.seats] == pytest.approx([0, 90, 180, 270])

def test_delete_table(store):
    store.save_table(create_table(1, 300, 300))
    store.save_table(create_table(2, 500, 300))

    assert store.delete_table(1) is True
    assert store.delete_table(1) is False
    assert [table.number for table in store.load_tables()] == [2]
    with TestingSessionLocal() as db:
        assert db.query(SeatAssignment).count() == 10

def test_replace_all_removes_only_stale_tables(store):
    for number in (1, 2, 3):
        store.save_table(create_table(number, 300, 300))
    with TestingSessionLocal() as db:
        kept_id = db.query(TableConfiguration).filter(TableConfiguration.table_number == 2).one().id

    store.replace_all([create_table(2, 700, 500, seat_count=4), create_table(9, 300, 300)])

    tables = store.load_tables()
    assert [table.number for table in tables] == [2, 9]
    assert (tables[0].x, tables[0].seat_count) == (700, 4)
    with TestingSessionLocal() as db:
        assert db.query(TableConfiguration).filter(TableConfiguration.table_number == 2).one().id == kept_id

def test_build_table_without_stored_angles():
    """Missing angles fall back to an even distribution"""
    table = build_table(4, "", 100, 100, 4, [{"seat_index": 1, "guest_name": "Carol"}])
    assert table.label == "Table 4"
    assert [seat.angle for seat in table.seats] == [0, 90, 180, 270]
    assert table.seats[1].guest_name == "Carol"

def test_get_layout_store_defaults_to_sql():
    assert isinstance(get_layout_store(Settings(USE_FIREBASE=False), TestingSessionLocal), SqlLayoutStore)
