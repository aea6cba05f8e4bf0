"""
Pytest configuration and shared fixtures.
"""

import copy
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from api.gateway import BookCollectionGateway
from api.main import create_app


class InMemoryCursor:
    """Stand-in for AsyncIOMotorCursor over a list of documents."""

    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        docs = [copy.deepcopy(doc) for doc in self._documents]
        return docs if length is None else docs[:length]


class InMemoryCollection:
    """
    Minimal in-memory double of an AsyncIOMotorCollection.

    Supports the single-document calls the gateway issues, with ``_id``
    assignment and ``$set`` merging as MongoDB performs them.
    """

    def __init__(self):
        self.documents = []
        self.database = SimpleNamespace(command=self._command)

    async def _command(self, name):
        return {"ok": 1.0}

    def _match(self, query):
        for doc in self.documents:
            if doc["_id"] == query["_id"]:
                return doc
        return None

    def find(self, query=None):
        return InMemoryCursor(self.documents)

    async def find_one(self, query):
        doc = self._match(query)
        return copy.deepcopy(doc) if doc is not None else None

    async def insert_one(self, document):
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        self.documents.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"], acknowledged=True)

    async def update_one(self, query, update):
        doc = self._match(query)
        if doc is None:
            return SimpleNamespace(matched_count=0, modified_count=0, acknowledged=True)
        doc.update(copy.deepcopy(update["$set"]))
        return SimpleNamespace(matched_count=1, modified_count=1, acknowledged=True)

    async def delete_one(self, query):
        doc = self._match(query)
        if doc is None:
            return SimpleNamespace(deleted_count=0, acknowledged=True)
        self.documents.remove(doc)
        return SimpleNamespace(deleted_count=1, acknowledged=True)


@pytest.fixture
def collection():
    """Empty in-memory books collection."""
    return InMemoryCollection()


@pytest.fixture
def gateway(collection):
    """Gateway over the in-memory collection."""
    return BookCollectionGateway(collection)


@pytest.fixture
def client(gateway):
    """Test client for an app wired to the in-memory gateway."""
    return TestClient(create_app(gateway=gateway))


@pytest.fixture
def sample_book_data():
    """Caller-supplied book fields."""
    return {"title": "Dune", "author": "Herbert", "year": 1965}


@pytest.fixture
def missing_book_id():
    """Well-formed identifier that is never stored."""
    return str(ObjectId())
