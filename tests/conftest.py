import os
import uuid

import pytest
from fastapi.testclient import TestClient
from pymongo import MongoClient

from catalog.config import get_settings
from catalog.main import app
from catalog.stores.sql import SqlProductStore
from catalog.stores.factory import create_store


# Test database (SQLite in-memory through the SQL store)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Server URL without a database path; each test gets its own database
MONGODB_URL_ENV = "TEST_MONGODB_URI"


@pytest.fixture(scope="session")
def mongo_url():
    """
    MongoDB server for the mongo leg of the API tests.

    Uses TEST_MONGODB_URI when set, otherwise starts a throwaway container.
    """
    url = os.environ.get(MONGODB_URL_ENV)
    if url:
        yield url
        return

    mongodb = pytest.importorskip("testcontainers.mongodb")
    container = mongodb.MongoDbContainer("mongo:7.0")
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"MongoDB container not available: {e}")

    yield container.get_connection_url()

    container.stop()


@pytest.fixture(params=["sql", "mongo"])
def backend(request):
    """Store backend the API runs against."""
    return request.param


@pytest.fixture(scope="function")
def client(backend, monkeypatch, request):
    """Create test client with a fresh database for each test."""
    if backend == "mongo":
        url = request.getfixturevalue("mongo_url")
        database_name = f"catalog_test_{uuid.uuid4().hex}"
    else:
        url = TEST_DATABASE_URL
        database_name = "unused"

    monkeypatch.setenv("MONGODB_URI", url)
    monkeypatch.setenv("DATABASE_NAME", database_name)
    get_settings.cache_clear()

    with TestClient(app) as test_client:
        yield test_client

    get_settings.cache_clear()

    # Drop the per-test database
    if backend == "mongo":
        with MongoClient(url) as mongo:
            mongo.drop_database(database_name)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def store():
    """Open a SQL store directly for service-level tests."""
    sql_store: SqlProductStore = create_store(TEST_DATABASE_URL)
    await sql_store.open()

    yield sql_store

    await sql_store.close()


@pytest.fixture
def store_messages(backend):
    """Fragments of the raw store error for each kind of rejected write."""
    if backend == "mongo":
        return {
            "duplicate": "E11000",
            "null": "Document failed validation",
            "check": "Document failed validation",
        }
    return {
        "duplicate": "UNIQUE",
        "null": "NOT NULL",
        "check": "CHECK",
    }


@pytest.fixture
def widget():
    """Payload for a valid product."""
    return {
        "name": "Widget",
        "description": "A small widget",
        "price": 9.99,
        "quantity": 5,
        "category": "Tools",
        "sku": "W-1"
    }
