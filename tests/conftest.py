"""
Shared fixtures: an in-memory MongoDB (mongomock) with the production
indexes, the record store and aggregate maintainer on top of it, and an
HTTP client wired to the same database.
"""

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from src.app import app
from src.database.db_manager import DBManager
from src.database.record_store import BOOKS, USERS, RecordStore
from src.services.aggregate_maintainer import AggregateMaintainer
from src.services.book_manager import BookManager
from src.services.user_manager import UserManager
from src.models.book_models import BookCreate

READER = "reader@example.com"
OTHER_READER = "other@example.com"
ADMIN = "admin@example.com"


@pytest.fixture
def db_manager():
    manager = DBManager(client=mongomock.MongoClient(), db_name="bookworm_test")
    manager.create_indexes()
    yield manager
    manager.close()


@pytest.fixture
def db(db_manager):
    return db_manager.db


@pytest.fixture
def store(db):
    return RecordStore(db)


@pytest.fixture
def maintainer(store):
    return AggregateMaintainer(store)


@pytest.fixture
def user_manager(store):
    return UserManager(store)


@pytest.fixture
def make_book(store, maintainer):
    """Factory: create a book and return its id string"""
    book_manager = BookManager(store, maintainer)

    def _make(title="Dune", author="Frank Herbert", genre="Sci-Fi", total_pages=300):
        book = book_manager.create_book(
            BookCreate(title=title, author=author, genre=genre, total_pages=total_pages)
        )
        return str(book["_id"])

    return _make


@pytest.fixture
def make_user(user_manager):
    """Factory: register a user and return the document"""

    def _make(email=READER, role=None):
        _, user = user_manager.register_or_login(email)
        if role:
            user = user_manager.set_role(str(user["_id"]), role)
        return user

    return _make


@pytest.fixture
def book_doc(store):
    """Reload a book by id"""
    return lambda book_id: store.find_one(BOOKS, {"_id": ObjectId(book_id)})


@pytest.fixture
def user_doc(store):
    """Reload a user by email"""
    return lambda email: store.find_one(USERS, {"email": email})


@pytest.fixture
def client(db_manager, monkeypatch):
    """TestClient on the real app; dev_<email> bearer tokens identify callers"""
    monkeypatch.setenv("ENV", "development")
    app.state.db_manager = db_manager
    yield TestClient(app)
    app.state.db_manager = None


@pytest.fixture
def auth():
    """Bearer header for a development token"""
    return lambda email: {"Authorization": f"Bearer dev_{email}"}
