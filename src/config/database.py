"""
Database dependencies for route handlers

The DBManager is created once in the application lifespan and kept on
app.state; handlers receive it (and the services built on it) through
these FastAPI dependencies.
"""

from fastapi import Depends, Request

from src.database.db_manager import DBManager
from src.database.record_store import RecordStore
from src.exceptions import UpstreamError
from src.services.aggregate_maintainer import AggregateMaintainer
from src.services.book_manager import BookManager
from src.services.genre_manager import GenreManager
from src.services.review_manager import ReviewManager
from src.services.shelf_manager import ShelfManager
from src.services.stats_service import StatsService
from src.services.tutorial_manager import TutorialManager
from src.services.user_manager import UserManager


def get_db_manager(request: Request) -> DBManager:
    """Get the process-wide database manager"""
    db_manager = getattr(request.app.state, "db_manager", None)
    if db_manager is None or db_manager.db is None:
        raise UpstreamError("Database not available", operation="get_db_manager")
    return db_manager


def get_record_store(db_manager: DBManager = Depends(get_db_manager)) -> RecordStore:
    return RecordStore(db_manager.db)


def get_maintainer(store: RecordStore = Depends(get_record_store)) -> AggregateMaintainer:
    return AggregateMaintainer(store)


def get_user_manager(store: RecordStore = Depends(get_record_store)) -> UserManager:
    return UserManager(store)


def get_book_manager(
    store: RecordStore = Depends(get_record_store),
    maintainer: AggregateMaintainer = Depends(get_maintainer),
) -> BookManager:
    return BookManager(store, maintainer)


def get_genre_manager(store: RecordStore = Depends(get_record_store)) -> GenreManager:
    return GenreManager(store)


def get_tutorial_manager(store: RecordStore = Depends(get_record_store)) -> TutorialManager:
    return TutorialManager(store)


def get_review_manager(store: RecordStore = Depends(get_record_store)) -> ReviewManager:
    return ReviewManager(store)


def get_shelf_manager(store: RecordStore = Depends(get_record_store)) -> ShelfManager:
    return ShelfManager(store)


def get_stats_service(store: RecordStore = Depends(get_record_store)) -> StatsService:
    return StatsService(store)
