"""Shared fixtures for gaadi tests."""

from datetime import datetime

import pytest

from gaadi import EntityStore, MemoryAdapter, NotificationDeduplicator, User


class FakeDocumentClient:
    """In-memory stand-in for the remote document database client."""

    def __init__(self):
        self.collections = {}
        self.calls = []
        self.fail = False

    def _check(self):
        if self.fail:
            raise ConnectionError("backend unavailable")

    def get(self, user_id, collection):
        self._check()
        self.calls.append(("get", collection))
        return [
            dict(r)
            for r in self.collections.get(collection, {}).values()
            if r.get("userId") == user_id
        ]

    def put(self, collection, record):
        self._check()
        self.calls.append(("put", collection, record["id"]))
        self.collections.setdefault(collection, {})[record["id"]] = dict(record)

    def update(self, collection, record_id, partial):
        self._check()
        self.calls.append(("update", collection, record_id))
        self.collections[collection][record_id].update(partial)

    def delete(self, collection, record_id):
        self._check()
        self.calls.append(("delete", collection, record_id))
        self.collections.get(collection, {}).pop(record_id, None)


@pytest.fixture
def now():
    return datetime(2025, 6, 1, 10, 0, 0)


@pytest.fixture
def user():
    return User(id="local-user", email="ravi@example.com")


@pytest.fixture
def adapter():
    return MemoryAdapter()


@pytest.fixture
def session_storage():
    return MemoryAdapter()


@pytest.fixture
def store(adapter, session_storage, user):
    """Initialized store backed by memory."""
    s = EntityStore(adapter, deduplicator=NotificationDeduplicator(session_storage))
    s.initialize(user)
    return s


@pytest.fixture
def swift(store):
    return store.add_vehicle(
        name="My Swift",
        make="Maruti Suzuki",
        model="Swift VXI",
        year=2021,
        registration_number="MH 12 AB 3456",
    )
