"""
Dashboard statistics tests

Run: pytest tests/test_stats_service.py -v
"""

from datetime import datetime, timezone

import pytest

from src.exceptions import NotFoundError
from src.models.shelf_models import ShelfType
from src.services.stats_service import StatsService

READER = "reader@example.com"


@pytest.fixture
def stats(store):
    return StatsService(store)


def test_user_stats(stats, maintainer, user_manager, make_book, make_user):
    make_user(READER)
    user_manager.set_goal(READER, 4)
    dune = make_book(title="Dune", genre="Sci-Fi", total_pages=300)
    emma = make_book(title="Emma", genre="Classic", total_pages=200)
    hobbit = make_book(title="The Hobbit", genre="Fantasy", total_pages=310)
    make_book(title="Unread", genre="Sci-Fi")

    maintainer.upsert_shelf_entry(READER, dune, ShelfType.READ)
    maintainer.upsert_shelf_entry(READER, emma, ShelfType.READ)
    maintainer.upsert_shelf_entry(READER, hobbit, ShelfType.READING, progress=120)

    result = stats.user_stats(READER)

    assert result["shelves"] == {"want-to-read": 0, "reading": 1, "read": 2}
    assert result["books_read_this_year"] == 2
    assert result["annual_goal"] == 4
    assert result["goal_progress"] == 50.0
    assert result["total_pages_read"] == 500
    assert result["pages_in_progress"] == 120
    assert {g["genre"] for g in result["genres_read"]} == {"Sci-Fi", "Classic"}
    this_month = datetime.now(timezone.utc).month
    assert result["monthly_finished"] == [{"month": this_month, "count": 2}]


def test_goal_progress_is_capped(stats, maintainer, user_manager, make_book, make_user):
    make_user(READER)
    user_manager.set_goal(READER, 1)
    for title in ("A", "B"):
        maintainer.upsert_shelf_entry(READER, make_book(title=title), ShelfType.READ)

    assert stats.user_stats(READER)["goal_progress"] == 100.0


def test_user_stats_without_goal(stats, make_user):
    make_user(READER)

    result = stats.user_stats(READER)

    assert result["goal_progress"] == 0.0
    assert result["monthly_finished"] == []


def test_user_stats_unknown_user(stats):
    with pytest.raises(NotFoundError):
        stats.user_stats("ghost@example.com")


def test_admin_stats(stats, maintainer, make_book, make_user):
    make_user(READER)
    make_user("other@example.com")
    dune = make_book(title="Dune", genre="Sci-Fi")
    make_book(title="Foundation", genre="Sci-Fi")
    make_book(title="Emma", genre="Classic")
    maintainer.upsert_shelf_entry(READER, dune, ShelfType.READING)
    maintainer.upsert_shelf_entry("other@example.com", dune, ShelfType.READ)
    maintainer.record_or_update_review(dune, READER, 4)

    result = stats.admin_stats()

    assert result["total_users"] == 2
    assert result["total_books"] == 3
    assert result["total_reviews"] == 1
    assert result["pending_reviews"] == 1
    assert result["total_shelf_entries"] == 2
    assert result["books_per_genre"][0] == {"genre": "Sci-Fi", "count": 2}
    assert result["top_shelved_books"][0]["title"] == "Dune"
    assert result["top_shelved_books"][0]["shelved_count"] == 2
