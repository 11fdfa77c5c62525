"""
Stats Service
Dashboard aggregations for readers and admins
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from src.database.record_store import (
    BOOKS,
    GENRES,
    REVIEWS,
    SHELVES,
    TUTORIALS,
    USERS,
    RecordStore,
)
from src.exceptions import NotFoundError
from src.models.book_review_models import ReviewStatus
from src.models.shelf_models import ShelfType

logger = logging.getLogger(__name__)

TOP_BOOKS_LIMIT = 5


class StatsService:
    def __init__(self, store: RecordStore):
        self.store = store

    def _count_by(self, collection: str, match: Dict[str, Any], field: str) -> List[Dict[str, Any]]:
        """[{key, count}] grouped on field, largest first"""
        pipeline = [
            {"$match": match},
            {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
        ]
        return [
            {"key": row["_id"], "count": row["count"]}
            for row in self.store.aggregate(collection, pipeline)
            if row["_id"] is not None
        ]

    def user_stats(self, user_email: str) -> Dict[str, Any]:
        user = self.store.find_one(USERS, {"email": user_email})
        if not user:
            raise NotFoundError("User", user_email)

        shelves = {shelf.value: 0 for shelf in ShelfType}
        for row in self._count_by(SHELVES, {"user_email": user_email}, "shelf_type"):
            shelves[row["key"]] = row["count"]

        entries = self.store.find(
            SHELVES,
            {"user_email": user_email},
            projection={"shelf_type": 1, "progress": 1, "total_pages": 1, "genre": 1, "finished_at": 1},
        )
        read_entries = [e for e in entries if e.get("shelf_type") == ShelfType.READ.value]

        total_pages_read = sum(e.get("total_pages") or 0 for e in read_entries)
        pages_in_progress = sum(
            e.get("progress") or 0
            for e in entries
            if e.get("shelf_type") == ShelfType.READING.value
        )

        genres = self._count_by(
            SHELVES,
            {"user_email": user_email, "shelf_type": ShelfType.READ.value},
            "genre",
        )

        current_year = datetime.now(timezone.utc).year
        months: Dict[int, int] = {}
        for entry in read_entries:
            finished_at = entry.get("finished_at")
            if finished_at and finished_at.year == current_year:
                months[finished_at.month] = months.get(finished_at.month, 0) + 1

        books_read = user.get("books_read_this_year", 0)
        annual_goal = user.get("annual_goal", 0)
        goal_progress = (
            round(min(100.0, books_read / annual_goal * 100), 1) if annual_goal else 0.0
        )

        return {
            "shelves": shelves,
            "books_read_this_year": books_read,
            "annual_goal": annual_goal,
            "goal_progress": goal_progress,
            "total_pages_read": total_pages_read,
            "pages_in_progress": pages_in_progress,
            "genres_read": [{"genre": g["key"], "count": g["count"]} for g in genres],
            "monthly_finished": [
                {"month": month, "count": months[month]} for month in sorted(months)
            ],
        }

    def admin_stats(self) -> Dict[str, Any]:
        top_books = self.store.find(
            BOOKS,
            {},
            sort=[("shelved_count", -1), ("average_rating", -1)],
            limit=TOP_BOOKS_LIMIT,
        )
        books_per_genre = self._count_by(BOOKS, {}, "genre")

        stats = {
            "total_users": self.store.count(USERS, {}),
            "total_books": self.store.count(BOOKS, {}),
            "total_reviews": self.store.count(REVIEWS, {}),
            "pending_reviews": self.store.count(
                REVIEWS, {"status": ReviewStatus.PENDING.value}
            ),
            "total_shelf_entries": self.store.count(SHELVES, {}),
            "total_genres": self.store.count(GENRES, {}),
            "total_tutorials": self.store.count(TUTORIALS, {}),
            "books_per_genre": [
                {"genre": g["key"], "count": g["count"]} for g in books_per_genre
            ],
            "top_shelved_books": [
                {
                    "id": str(book["_id"]),
                    "title": book.get("title", ""),
                    "author": book.get("author", ""),
                    "shelved_count": book.get("shelved_count", 0),
                    "average_rating": book.get("average_rating", 0.0),
                }
                for book in top_books
            ],
        }
        logger.info(
            f"📊 Admin stats: {stats['total_users']} users, {stats['total_books']} books"
        )
        return stats
