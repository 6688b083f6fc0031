"""
Tests for session persistence and the inactivity window.
"""

from __future__ import annotations

import json
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Any

from booking_bot.application.utils.state_helpers import reset_session
from booking_bot.domain.entities.session import Session
from booking_bot.infrastructure.store import firestore_store
from booking_bot.infrastructure.store.firestore_store import FirestoreSessionStore
from booking_bot.infrastructure.store.json_store import JsonSessionStore
from booking_bot.infrastructure.store.memory_store import MemorySessionStore


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance_minutes(self, minutes: float) -> None:
        self.now += minutes * 60


class FakeSnapshot:
    def __init__(self, data: dict[str, Any] | None) -> None:
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> dict[str, Any] | None:
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, documents: dict[str, dict[str, Any]], doc_id: str) -> None:
        self._documents = documents
        self._doc_id = doc_id

    def get(self) -> FakeSnapshot:
        return FakeSnapshot(self._documents.get(self._doc_id))

    def set(self, data: dict[str, Any]) -> None:
        self._documents[self._doc_id] = dict(data)

    def delete(self) -> None:
        self._documents.pop(self._doc_id, None)


class FakeCollection:
    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}

    def document(self, doc_id: str) -> FakeDocument:
        return FakeDocument(self.documents, doc_id)


class FakeFirestoreClient:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}

    def collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


def _advanced(session: Session) -> Session:
    return replace(
        session,
        step=5,
        category_id=1,
        category_name="Cabelo",
        service_id=10,
        service_name="Corte",
        date="2025-05-01",
    )


def _check_store_contract(store, clock: FakeClock) -> None:
    assert store.get("5511") is None

    session, created = store.get_or_create("5511")
    assert created is True
    assert session.step == 1
    assert session.created_at == clock.now

    again, created = store.get_or_create("5511")
    assert created is False
    assert again.user_id == "5511"

    clock.advance_minutes(10)
    updated = store.update(_advanced(again))
    assert updated.last_interaction_at == clock.now
    assert updated.created_at == session.created_at

    stored = store.get("5511")
    assert stored.step == 5
    assert stored.service_name == "Corte"
    assert stored.date == "2025-05-01"

    store.update(reset_session(stored))
    stored = store.get("5511")
    assert stored.step == 1
    assert stored.category_id is None
    assert stored.date is None

    store.delete("5511")
    assert store.get("5511") is None


def _check_expiry(store, clock: FakeClock) -> None:
    session, _ = store.get_or_create("5522")
    store.update(_advanced(session))

    clock.advance_minutes(29)
    assert store.get("5522").step == 5

    clock.advance_minutes(31)
    assert store.get("5522") is None

    fresh, created = store.get_or_create("5522")
    assert created is True
    assert fresh.step == 1


def test_memory_store_contract():
    """Memory store creates, updates, resets and deletes sessions."""
    clock = FakeClock()
    _check_store_contract(MemorySessionStore(clock=clock), clock)


def test_memory_store_expires_after_inactivity():
    """A session idle for more than 30 minutes is discarded."""
    clock = FakeClock()
    _check_expiry(MemorySessionStore(clock=clock), clock)


def test_json_store_contract():
    """JSON store round-trips sessions through one file per user."""
    with tempfile.TemporaryDirectory() as tmpdir:
        clock = FakeClock()
        _check_store_contract(JsonSessionStore(data_dir=tmpdir, clock=clock), clock)


def test_json_store_expires_after_inactivity():
    with tempfile.TemporaryDirectory() as tmpdir:
        clock = FakeClock()
        store = JsonSessionStore(data_dir=tmpdir, clock=clock)
        _check_expiry(store, clock)


def test_json_store_writes_document_keys():
    """The stored file uses the document field names and omits unset selections."""
    with tempfile.TemporaryDirectory() as tmpdir:
        clock = FakeClock()
        store = JsonSessionStore(data_dir=tmpdir, clock=clock)
        session = store.create("+55 11 9999")
        store.update(replace(session, step=3, category_id=2, category_name="Barba"))

        files = list(Path(tmpdir).glob("*.json"))
        assert len(files) == 1
        document = json.loads(files[0].read_text(encoding="utf-8"))
        assert document["phoneNumber"] == "+55 11 9999"
        assert document["step"] == 3
        assert document["selectedCategoryId"] == 2
        assert document["selectedCategoryName"] == "Barba"
        assert "selectedServiceId" not in document
        assert document["lastInteractionAt"] == clock.now


def test_json_store_corrupted_file_is_missing_session():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonSessionStore(data_dir=tmpdir, clock=FakeClock())
        (Path(tmpdir) / "5533.json").write_text("{not json", encoding="utf-8")

        assert store.get("5533") is None
        _, created = store.get_or_create("5533")
        assert created is True
        assert store.get("5533").step == 1


def test_firestore_store_contract():
    """Firestore store keeps one document per phone number in the sessions collection."""
    clock = FakeClock()
    client = FakeFirestoreClient()
    _check_store_contract(FirestoreSessionStore(client=client, clock=clock), clock)


def test_firestore_store_expires_and_deletes_document():
    clock = FakeClock()
    client = FakeFirestoreClient()
    store = FirestoreSessionStore(client=client, collection="sessions", clock=clock)
    _check_expiry(store, clock)

    clock.advance_minutes(45)
    assert store.get("5522") is None
    assert "5522" not in client.collection("sessions").documents


def test_firestore_update_overwrites_cleared_fields():
    clock = FakeClock()
    client = FakeFirestoreClient()
    store = FirestoreSessionStore(client=client, clock=clock)
    session = store.create("5544")
    store.update(_advanced(session))
    store.update(reset_session(store.get("5544")))

    document = client.collection("sessions").documents["5544"]
    assert document["step"] == 1
    assert "selectedServiceId" not in document
    assert "selectedDate" not in document


def test_session_from_document_with_bad_step():
    session = Session.from_document({"phoneNumber": "5555", "step": "abc", "lastInteractionAt": 1.0})
    assert session.user_id == "5555"
    assert session.step == 0


def test_firestore_client_initializes_default_app_once(monkeypatch):
    initialized = []
    apps = []

    def get_app():
        if not apps:
            raise ValueError("The default Firebase app does not exist.")
        return apps[0]

    def initialize_app(credential=None):
        initialized.append(credential)
        apps.append("default")

    monkeypatch.setattr(firestore_store.firebase_admin, "get_app", get_app)
    monkeypatch.setattr(firestore_store.firebase_admin, "initialize_app", initialize_app)
    monkeypatch.setattr(firestore_store.credentials, "Certificate", lambda path: f"cert:{path}")
    monkeypatch.setattr(firestore_store.firestore, "client", lambda: "firestore-client")

    assert firestore_store.build_firestore_client("/secrets/firebase.json") == "firestore-client"
    assert firestore_store.build_firestore_client("/secrets/firebase.json") == "firestore-client"
    assert initialized == ["cert:/secrets/firebase.json"]
