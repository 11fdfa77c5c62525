"""
Book Manager Service
Catalogue CRUD and search. Deletion cascades through the aggregate
maintainer so reviews and shelf entries never dangle.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from src.database.record_store import BOOKS, RecordStore
from src.exceptions import NotFoundError
from src.models.book_models import BookCreate, BookSort, BookUpdate
from src.services.aggregate_maintainer import AggregateMaintainer, CascadeDeleteResult
from src.utils.id_utils import parse_object_id

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    BookSort.NEWEST: [("created_at", -1)],
    BookSort.RATING: [("average_rating", -1), ("total_reviews", -1)],
    BookSort.POPULAR: [("shelved_count", -1), ("created_at", -1)],
    BookSort.TITLE: [("title", 1)],
}


class BookManager:
    def __init__(self, store: RecordStore, maintainer: AggregateMaintainer):
        self.store = store
        self.maintainer = maintainer

    def create_book(self, data: BookCreate) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        doc = data.model_dump()
        doc.update(
            {
                "average_rating": 0.0,
                "total_reviews": 0,
                "shelved_count": 0,
                "created_at": now,
                "updated_at": now,
            }
        )
        book = self.store.insert(BOOKS, doc)
        logger.info(f"📖 Book created: {book['_id']} '{book['title']}'")
        return book

    def get_book(self, book_id: str) -> Dict[str, Any]:
        book = self.store.find_one(BOOKS, {"_id": parse_object_id(book_id, "book_id")})
        if not book:
            raise NotFoundError("Book", book_id)
        return book

    def list_books(
        self,
        search: Optional[str] = None,
        genre: Optional[str] = None,
        sort: BookSort = BookSort.NEWEST,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Search by title or author (case-insensitive substring), filter by genre.
        """
        query: Dict[str, Any] = {}
        if search:
            pattern = re.escape(search.strip())
            query["$or"] = [
                {"title": {"$regex": pattern, "$options": "i"}},
                {"author": {"$regex": pattern, "$options": "i"}},
            ]
        if genre:
            query["genre"] = genre

        total = self.store.count(BOOKS, query)
        books = self.store.find(
            BOOKS, query, sort=SORT_FIELDS[sort], skip=skip, limit=limit
        )
        return books, total

    def update_book(self, book_id: str, data: BookUpdate) -> Dict[str, Any]:
        book_oid = parse_object_id(book_id, "book_id")
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return self.get_book(book_id)

        changes["updated_at"] = datetime.now(timezone.utc)
        book = self.store.update(BOOKS, {"_id": book_oid}, changes)
        if book is None:
            raise NotFoundError("Book", book_id)
        logger.info(f"📝 Book {book_oid} updated: {sorted(changes)}")
        return book

    def delete_book(self, book_id: str) -> CascadeDeleteResult:
        """Deleting a book that is already gone is a no-op"""
        return self.maintainer.delete_book_cascade(book_id)
