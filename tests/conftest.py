"""
Pytest configuration.

Provides an in-memory stand-in for the Firestore client covering the calls
the plan repository makes, plus app/client fixtures wired to it.
"""

import copy
import uuid
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from google.api_core.exceptions import NotFound

from plan_directory.core.plans import PlanRepository, PlanService
from plan_directory.main import create_app


class FakeSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict[str, Any]]):
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentReference:
    def __init__(self, db: "FakeFirestore", collection: str, doc_id: str):
        self._db = db
        self._collection = collection
        self.id = doc_id

    @property
    def _store(self) -> Dict[str, Dict[str, Any]]:
        return self._db.store.setdefault(self._collection, {})

    def get(self, field_paths: Optional[List[str]] = None, **kwargs) -> FakeSnapshot:
        self._db.check()
        data = self._store.get(self.id)
        if data is not None and field_paths is not None:
            data = {key: value for key, value in data.items() if key in field_paths}
        return FakeSnapshot(self.id, data)

    def set(self, data: Dict[str, Any], **kwargs) -> None:
        self._db.check()
        self._store[self.id] = copy.deepcopy(data)

    def update(self, data: Dict[str, Any], **kwargs) -> None:
        self._db.check()
        if self.id not in self._store:
            raise NotFound(f"No document to update: {self.id}")
        self._store[self.id].update(copy.deepcopy(data))


class FakeQuery:
    def __init__(self, db: "FakeFirestore", collection: str, filters=None, limit: Optional[int] = None):
        self._db = db
        self._collection = collection
        self._filters = list(filters or [])
        self._limit = limit

    def where(self, filter=None, **kwargs) -> "FakeQuery":
        assert filter.op_string == "==", "only equality filters are used"
        return FakeQuery(self._db, self._collection, self._filters + [filter], self._limit)

    def limit(self, count: int) -> "FakeQuery":
        return FakeQuery(self._db, self._collection, self._filters, count)

    def stream(self, **kwargs):
        self._db.check()
        self._db.stream_kwargs.append(kwargs)
        docs = self._db.store.get(self._collection, {})
        matched = [
            FakeSnapshot(doc_id, data)
            for doc_id, data in docs.items()
            if all(data.get(f.field_path) == f.value for f in self._filters)
        ]
        if self._limit is not None:
            matched = matched[: self._limit]
        return iter(matched)


class FakeCollection(FakeQuery):
    def document(self, doc_id: Optional[str] = None) -> FakeDocumentReference:
        return FakeDocumentReference(self._db, self._collection, doc_id or uuid.uuid4().hex[:20])


class FakeFirestore:
    """In-memory document store. Set ``fail_with`` to make every call raise it."""

    def __init__(self):
        self.store: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.fail_with: Optional[Exception] = None
        self.stream_kwargs: List[Dict[str, Any]] = []
        self.closed = False

    def check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def firestore_db() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def repository(firestore_db) -> PlanRepository:
    return PlanRepository(firestore_db, collection_name="plans")


@pytest.fixture
def service(repository) -> PlanService:
    return PlanService(repository)


@pytest.fixture
def app(firestore_db):
    return create_app(firestore_client=firestore_db)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
