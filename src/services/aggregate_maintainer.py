"""
Aggregate Maintainer
Keeps the derived counters on books and users in sync with reviews and
shelf entries.

Derived fields:
- books.average_rating / books.total_reviews: recomputed from approved
  reviews after every review write
- books.shelved_count: +1 when a shelf entry is created, -1 when removed
- users.books_read_this_year: +1 when an entry enters "read",
  -1 when it leaves "read" (re-shelving or removal)

Counter changes are atomic $inc deltas. The rating is a full recompute,
so a later review write always repairs a stale value.

Callers are expected to be authorized already; no role checks here.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Tuple, Union

from bson import ObjectId
from pydantic import ValidationError

from src.database.record_store import (
    BOOKS,
    REVIEWS,
    SHELVES,
    USERS,
    DeleteResult,
    RecordStore,
)
from src.exceptions import InvalidInputError, NotFoundError, UpstreamError
from src.models.book_models import BookSnapshot
from src.models.book_review_models import ReviewStatus
from src.models.shelf_models import ShelfType
from src.utils.id_utils import normalize_object_id, parse_object_id

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


@dataclass
class CascadeDeleteResult:
    book: DeleteResult
    reviews: DeleteResult
    shelf_entries: DeleteResult


def round_rating(value: float) -> float:
    """Round half up to one decimal (4.25 -> 4.3)"""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{field} must be an integer", field=field, value=value)
    return value


def _require_email(user_email: str) -> str:
    if not user_email or not isinstance(user_email, str):
        raise InvalidInputError("user_email is required", field="user_email", value=user_email)
    return user_email


class AggregateMaintainer:
    """Review and shelf writes plus the derived-field bookkeeping they trigger"""

    def __init__(self, store: RecordStore):
        self.store = store

    # ===== REVIEWS =====

    def record_or_update_review(
        self,
        book_id: str,
        user_email: str,
        rating: int,
        comment: str = "",
        book_title: Optional[str] = None,
        user_name: Optional[str] = None,
        user_photo: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create or replace the caller's review of a book.

        Every submission goes back to pending; the book's rating is
        recomputed so an edit of an approved review drops it from the
        average until it is approved again.

        Returns:
            The stored review document
        """
        book_oid = parse_object_id(book_id, "book_id")
        user_email = _require_email(user_email)
        rating = _require_int(rating, "rating")
        if not MIN_RATING <= rating <= MAX_RATING:
            raise InvalidInputError(
                f"rating must be between {MIN_RATING} and {MAX_RATING}",
                field="rating",
                value=rating,
            )

        book = self.store.find_one(BOOKS, {"_id": book_oid})
        if not book:
            raise NotFoundError("Book", book_id)

        now = _utcnow()
        result = self.store.upsert(
            REVIEWS,
            {"book_id": str(book_oid), "user_email": user_email},
            set_doc={
                "rating": rating,
                "comment": comment or "",
                "book_title": book_title or book.get("title", ""),
                "user_name": user_name,
                "user_photo": user_photo,
                "status": ReviewStatus.PENDING.value,
                "updated_at": now,
            },
            set_on_insert={"created_at": now},
        )

        logger.info(
            f"✅ Review {result.outcome.value} by {user_email} for book {book_oid} "
            f"(rating={rating}, status=pending)"
        )

        self.recompute_book_rating(str(book_oid))
        return result.document

    def approve_review(self, review_id: str) -> bool:
        review_oid = parse_object_id(review_id, "review_id")

        review = self.store.update(
            REVIEWS,
            {"_id": review_oid},
            {"status": ReviewStatus.APPROVED.value, "updated_at": _utcnow()},
        )
        if review is None:
            raise NotFoundError("Review", review_id)

        logger.info(f"✅ Review {review_oid} approved for book {review['book_id']}")
        self.recompute_book_rating(review["book_id"])
        return True

    def delete_review(self, review_id: str) -> DeleteResult:
        review_oid = parse_object_id(review_id, "review_id")

        review = self.store.pop(REVIEWS, {"_id": review_oid})
        if review is None:
            raise NotFoundError("Review", review_id)

        logger.info(f"🗑️ Review {review_oid} deleted from book {review['book_id']}")
        self.recompute_book_rating(review["book_id"])
        return DeleteResult(deleted_count=1)

    def recompute_book_rating(self, book_id: str) -> Tuple[float, int]:
        """
        Overwrite average_rating / total_reviews from the approved reviews.

        Returns:
            (average_rating, total_reviews); (0.0, 0) when nothing is approved
        """
        pipeline = [
            {"$match": {"book_id": book_id, "status": ReviewStatus.APPROVED.value}},
            {
                "$group": {
                    "_id": None,
                    "average": {"$avg": "$rating"},
                    "count": {"$sum": 1},
                }
            },
        ]
        rows = self.store.aggregate(REVIEWS, pipeline)

        if rows and rows[0].get("count"):
            total_reviews = rows[0]["count"]
            average_rating = round_rating(rows[0]["average"])
        else:
            total_reviews = 0
            average_rating = 0.0

        self.store.update(
            BOOKS,
            {"_id": ObjectId(book_id)},
            {"average_rating": average_rating, "total_reviews": total_reviews},
        )
        logger.info(
            f"📊 Book {book_id} rating recomputed: {average_rating} ({total_reviews} approved)"
        )
        return average_rating, total_reviews

    # ===== SHELVES =====

    def upsert_shelf_entry(
        self,
        user_email: str,
        book_id: str,
        shelf_type: Union[ShelfType, str],
        progress: Optional[int] = None,
        book_snapshot: Optional[Union[BookSnapshot, Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Put a book on one of the user's shelves, creating or moving the entry.

        - "read" forces progress to the book's page count
        - otherwise progress defaults to 0, negatives clamp to 0 and values
          past the last page clamp to total_pages

        The book is always loaded (NotFoundError if absent); without a snapshot
        its display fields are copied from it.

        Returns:
            The stored shelf entry
        """
        user_email = _require_email(user_email)
        book_id = normalize_object_id(book_id, "book_id")
        shelf_type = self._parse_shelf_type(shelf_type)
        book_snapshot = self._resolve_snapshot(book_id, book_snapshot)

        progress = self._resolve_progress(shelf_type, progress, book_snapshot.total_pages)

        now = _utcnow()
        result = self.store.upsert(
            SHELVES,
            {"user_email": user_email, "book_id": book_id},
            set_doc={
                "shelf_type": shelf_type.value,
                "progress": progress,
                "title": book_snapshot.title,
                "author": book_snapshot.author,
                "genre": book_snapshot.genre,
                "cover_image": book_snapshot.cover_image,
                "total_pages": book_snapshot.total_pages,
                "updated_at": now,
            },
            set_on_insert={"created_at": now},
        )
        entry = result.document

        logger.info(
            f"📚 Shelf entry {result.outcome.value}: {user_email} -> book {book_id} "
            f"({shelf_type.value}, progress={progress})"
        )

        if result.created:
            self._adjust_counter(BOOKS, {"_id": ObjectId(book_id)}, "shelved_count", 1)

        previous_type = result.previous.get("shelf_type") if result.previous else None
        delta = self._apply_read_transition(user_email, previous_type, shelf_type.value)
        if delta:
            entry = self._stamp_finished(entry, delta > 0, now)

        return entry

    def advance_progress(self, shelf_entry_id: str, new_progress: int) -> Dict[str, Any]:
        """
        Record pages read. Reaching the last page of a book that is not
        yet on the read shelf moves the entry to "read".
        """
        entry_oid = parse_object_id(shelf_entry_id, "shelf_entry_id")
        new_progress = _require_int(new_progress, "progress")
        if new_progress < 0:
            raise InvalidInputError(
                "progress cannot be negative", field="progress", value=new_progress
            )

        entry = self.store.find_one(SHELVES, {"_id": entry_oid})
        if entry is None:
            raise NotFoundError("Shelf entry", shelf_entry_id)

        total_pages = entry.get("total_pages") or 0
        progress = min(new_progress, total_pages) if total_pages else new_progress
        now = _utcnow()

        completes = (
            total_pages > 0
            and new_progress >= total_pages
            and entry.get("shelf_type") != ShelfType.READ.value
        )

        if completes:
            # Only the writer that flips the shelf gets a document back,
            # so the read counter moves once per completion.
            updated = self.store.update(
                SHELVES,
                {"_id": entry_oid, "shelf_type": {"$ne": ShelfType.READ.value}},
                {
                    "progress": progress,
                    "shelf_type": ShelfType.READ.value,
                    "finished_at": now,
                    "updated_at": now,
                },
            )
            if updated is not None:
                logger.info(f"🎉 Shelf entry {entry_oid} completed at page {progress}")
                self._apply_read_transition(
                    entry["user_email"], entry.get("shelf_type"), ShelfType.READ.value
                )
                return updated

        updated = self.store.update(
            SHELVES, {"_id": entry_oid}, {"progress": progress, "updated_at": now}
        )
        if updated is None:
            raise NotFoundError("Shelf entry", shelf_entry_id)
        return updated

    def remove_shelf_entry(self, shelf_entry_id: str) -> DeleteResult:
        """
        Delete an entry and reverse its counters. An entry that is already
        gone is a no-op and moves nothing.
        """
        entry_oid = parse_object_id(shelf_entry_id, "shelf_entry_id")

        entry = self.store.pop(SHELVES, {"_id": entry_oid})
        if entry is None:
            logger.info(f"Shelf entry {entry_oid} already absent, nothing to remove")
            return DeleteResult(deleted_count=0)

        logger.info(
            f"🗑️ Shelf entry removed: {entry['user_email']} -> book {entry['book_id']}"
        )
        self._adjust_counter(
            BOOKS, {"_id": ObjectId(entry["book_id"])}, "shelved_count", -1
        )
        self._apply_read_transition(entry["user_email"], entry.get("shelf_type"), None)
        return DeleteResult(deleted_count=1)

    # ===== BOOKS =====

    def delete_book_cascade(self, book_id: str) -> CascadeDeleteResult:
        """
        Delete a book with its reviews and shelf entries, in that order.
        Missing records are skipped silently.
        """
        book_id = normalize_object_id(book_id, "book_id")

        reviews = self.store.delete_many(REVIEWS, {"book_id": book_id})

        # Entries are popped one at a time so each removed "read" entry
        # reverses its reader's count exactly once
        removed = 0
        while True:
            entry = self.store.pop(SHELVES, {"book_id": book_id})
            if entry is None:
                break
            removed += 1
            self._apply_read_transition(entry["user_email"], entry.get("shelf_type"), None)
        shelf_entries = DeleteResult(deleted_count=removed)

        book = self.store.delete_one(BOOKS, {"_id": ObjectId(book_id)})

        logger.info(
            f"🗑️ Book {book_id} cascade delete: book={book.deleted_count}, "
            f"reviews={reviews.deleted_count}, shelf_entries={shelf_entries.deleted_count}"
        )
        return CascadeDeleteResult(book=book, reviews=reviews, shelf_entries=shelf_entries)

    # ===== HELPERS =====

    def _apply_read_transition(
        self,
        user_email: str,
        previous_type: Optional[str],
        new_type: Optional[str],
    ) -> int:
        """
        Move users.books_read_this_year on edges into or out of "read".

        previous_type None means the entry did not exist; new_type None
        means it was removed. Returns the delta applied (-1, 0 or 1).
        """
        was_read = previous_type == ShelfType.READ.value
        is_read = new_type == ShelfType.READ.value
        if was_read == is_read:
            return 0

        delta = 1 if is_read else -1
        self._adjust_counter(USERS, {"email": user_email}, "books_read_this_year", delta)
        return delta

    def _adjust_counter(
        self, collection: str, query: Dict[str, Any], field: str, delta: int
    ) -> bool:
        try:
            changed = self.store.increment(collection, query, field, delta)
        except UpstreamError:
            logger.error(
                f"❌ Counter {collection}.{field} {delta:+d} failed for {query}; "
                "primary write already applied",
                exc_info=True,
            )
            raise

        if changed:
            logger.info(f"🔢 {collection}.{field} {delta:+d} for {query}")
        else:
            logger.warning(f"⚠️ {collection}.{field} {delta:+d} matched nothing for {query}")
        return changed

    def _stamp_finished(
        self, entry: Dict[str, Any], entered_read: bool, now: datetime
    ) -> Dict[str, Any]:
        updated = self.store.update(
            SHELVES,
            {"_id": entry["_id"]},
            {"finished_at": now if entered_read else None},
        )
        return updated or entry

    def _resolve_snapshot(
        self,
        book_id: str,
        book_snapshot: Optional[Union[BookSnapshot, Dict[str, Any]]],
    ) -> BookSnapshot:
        """The book must exist; a caller's snapshot only supplies display fields"""
        if isinstance(book_snapshot, dict):
            try:
                book_snapshot = BookSnapshot(**book_snapshot)
            except ValidationError as e:
                raise InvalidInputError(f"Invalid book snapshot: {e}", field="book_snapshot")

        book = self.store.find_one(BOOKS, {"_id": ObjectId(book_id)})
        if not book:
            raise NotFoundError("Book", book_id)
        if book_snapshot is None:
            book_snapshot = BookSnapshot.from_document(book)
        return book_snapshot

    @staticmethod
    def _parse_shelf_type(shelf_type: Union[ShelfType, str]) -> ShelfType:
        try:
            return ShelfType(shelf_type)
        except ValueError:
            allowed = ", ".join(t.value for t in ShelfType)
            raise InvalidInputError(
                f"shelf_type must be one of: {allowed}",
                field="shelf_type",
                value=shelf_type,
            )

    @staticmethod
    def _resolve_progress(
        shelf_type: ShelfType, progress: Optional[int], total_pages: int
    ) -> int:
        if shelf_type is ShelfType.READ:
            return total_pages
        if progress is None:
            return 0
        progress = max(0, _require_int(progress, "progress"))
        if total_pages:
            progress = min(progress, total_pages)
        return progress
