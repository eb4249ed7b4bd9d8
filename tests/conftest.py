"""
Pytest configuration and fixtures for catalog tests.
"""

import asyncio

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from catalog.config.database import get_database
from catalog.services.category_store import CategoryStore
from catalog.utils.timezone import utc_now
from main import app


@pytest.fixture
def mock_db():
    """Fresh in-memory MongoDB database for each test."""
    return AsyncMongoMockClient()["catalog_test"]


@pytest.fixture
def store(mock_db):
    """CategoryStore bound to the in-memory database."""
    return CategoryStore(mock_db)


@pytest.fixture
def admin_id():
    """Id of the administrator performing writes."""
    return ObjectId()


@pytest.fixture
def client(mock_db):
    """Test client with the database dependency pointed at the in-memory database.

    The client is not used as a context manager, so the lifespan (and its real
    MongoDB connection) never runs.
    """
    async def override_get_database():
        return mock_db

    app.dependency_overrides[get_database] = override_get_database
    yield TestClient(app)
    app.dependency_overrides.clear()


def raw_category(name, level, parent=None, **extra):
    """A categories document written straight to the collection, bypassing validation."""
    now = utc_now()
    document = {
        "_id": ObjectId(),
        "name": name,
        "parent": parent,
        "level": level,
        "sortOrder": 0,
        "isActive": True,
        "createdAt": now,
        "updatedAt": now,
    }
    document.update(extra)
    return document


def insert_raw(db, document):
    """Insert a raw document from synchronous test code."""
    asyncio.run(db.categories.insert_one(document))
    return document["_id"]
