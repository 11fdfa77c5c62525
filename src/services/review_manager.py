"""
Review Manager Service
Read side of reviews: public listings, own reviews and the moderation
queue. Writes go through the aggregate maintainer.
"""

from typing import Any, Dict, List, Optional, Tuple

from src.database.record_store import REVIEWS, RecordStore
from src.exceptions import NotFoundError
from src.models.book_review_models import ReviewStatus
from src.utils.id_utils import normalize_object_id, parse_object_id


class ReviewManager:
    def __init__(self, store: RecordStore):
        self.store = store

    def get_review(self, review_id: str) -> Dict[str, Any]:
        review = self.store.find_one(
            REVIEWS, {"_id": parse_object_id(review_id, "review_id")}
        )
        if not review:
            raise NotFoundError("Review", review_id)
        return review

    def list_book_reviews(
        self, book_id: str, skip: int = 0, limit: int = 20
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Approved reviews of a book, newest first"""
        query = {
            "book_id": normalize_object_id(book_id, "book_id"),
            "status": ReviewStatus.APPROVED.value,
        }
        total = self.store.count(REVIEWS, query)
        reviews = self.store.find(
            REVIEWS, query, sort=[("updated_at", -1)], skip=skip, limit=limit
        )
        return reviews, total

    def list_user_reviews(self, user_email: str) -> List[Dict[str, Any]]:
        return self.store.find(
            REVIEWS, {"user_email": user_email}, sort=[("updated_at", -1)]
        )

    def list_by_status(
        self,
        status: Optional[ReviewStatus] = ReviewStatus.PENDING,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Moderation queue, oldest submission first"""
        query = {"status": status.value} if status else {}
        total = self.store.count(REVIEWS, query)
        reviews = self.store.find(
            REVIEWS, query, sort=[("updated_at", 1)], skip=skip, limit=limit
        )
        return reviews, total
