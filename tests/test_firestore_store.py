"""
Tests for the Firestore layout store against an in-memory stand-in client
"""

import base64
import json
import pytest
from google.api_core import exceptions as google_exceptions

from seatplan.core.config import Settings
from seatplan.editor.layout import create_table
from seatplan.services.errors import StoreError
from seatplan.services.firebase_client import load_credentials_info
from seatplan.services.layout_store import FirestoreLayoutStore

class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self.exists = data is not None
        self._data = data

    def to_dict(self):
        return dict(self._data)

class FakeDocument:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.id = doc_id

    def set(self, data):
        self.collection.check()
        self.collection.docs[self.id] = dict(data)

    def get(self):
        self.collection.check()
        return FakeSnapshot(self, self.collection.docs.get(self.id))

    def delete(self):
        self.collection.check()
        self.collection.docs.pop(self.id, None)

class FakeCollection:
    def __init__(self):
        self.docs = {}
        self.offline = False
        self._order = None

    def check(self):
        if self.offline:
            raise google_exceptions.ServiceUnavailable("firestore unavailable")

    def document(self, doc_id):
        return FakeDocument(self, doc_id)

    def order_by(self, field):
        self._order = field
        return self

    def get(self):
        self.check()
        snapshots = [FakeSnapshot(FakeDocument(self, doc_id), data) for doc_id, data in self.docs.items()]
        if self._order:
            snapshots.sort(key=lambda snapshot: snapshot.to_dict()[self._order])
            self._order = None
        return snapshots

class FakeBatch:
    def __init__(self):
        self.operations = []

    def set(self, reference, data):
        self.operations.append(lambda: reference.set(data))

    def delete(self, reference):
        self.operations.append(reference.delete)

    def commit(self):
        for operation in self.operations:
            operation()

class FakeFirestore:
    def __init__(self):
        self.tables = FakeCollection()

    def collection(self, name):
        assert name == "table_configurations"
        return self.tables

    def batch(self):
        return FakeBatch()

@pytest.fixture
def client():
    return FakeFirestore()

@pytest.fixture
def store(client):
    return FirestoreLayoutStore(client)

def test_save_and_load(store, client):
    table = create_table(12, 640, 480, seat_count=6, label="Colleagues")
    table.seats[1].guest_name = "Erin"
    store.save_table(table)
    store.save_table(create_table(3, 100, 100))

    assert client.tables.docs["12"]["seat_count"] == 6
    loaded = store.load_tables()
    assert [t.number for t in loaded] == [3, 12]
    assert loaded[1].label == "Colleagues"
    assert loaded[1].seats[1].guest_name == "Erin"
    assert [seat.angle for seat in loaded[1].seats] == pytest.approx([60 * i for i in range(6)])

def test_delete_table(store):
    store.save_table(create_table(1, 100, 100))
    assert store.delete_table(1) is True
    assert store.delete_table(1) is False
    assert store.load_tables() == []

def test_replace_all_keeps_wanted_documents(store, client):
    for number in (1, 2, 3):
        store.save_table(create_table(number, 100, 100))
    store.replace_all([create_table(2, 300, 300), create_table(4, 500, 500)])
    assert sorted(client.tables.docs) == ["2", "4"]
    assert client.tables.docs["2"]["x"] == 300

def test_backend_errors_become_store_errors(store, client):
    client.tables.offline = True
    with pytest.raises(StoreError):
        store.load_tables()
    with pytest.raises(StoreError):
        store.save_table(create_table(1, 100, 100))
    with pytest.raises(StoreError):
        store.delete_table(1)

def test_credentials_from_json_and_base64(tmp_path):
    info = {"type": "service_account", "project_id": "seating"}
    assert load_credentials_info(Settings(FIREBASE_CREDENTIALS_JSON=json.dumps(info))) == info

    encoded = base64.b64encode(json.dumps(info).encode("utf-8")).decode("ascii")
    assert load_credentials_info(Settings(FIREBASE_CREDENTIALS_JSON=None, FIREBASE_CREDENTIALS_B64=encoded)) == info

    path = tmp_path / "service_account.json"
    path.write_text(json.dumps(info))
    settings = Settings(FIREBASE_CREDENTIALS_JSON=None, FIREBASE_CREDENTIALS_B64=None, FIREBASE_CREDENTIALS_FILE=str(path))
    assert load_credentials_info(settings) == info

    empty = Settings(FIREBASE_CREDENTIALS_JSON=None, FIREBASE_CREDENTIALS_B64=None, FIREBASE_CREDENTIALS_FILE=None)
    assert load_credentials_info(empty) is None
