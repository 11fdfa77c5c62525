"""
Book Review Routes
Endpoints for submitting, moderating and reading book reviews

Endpoints:
- POST /reviews - Submit or update own review (goes to moderation)
- GET /books/{book_id}/reviews - Approved reviews of a book
- GET /reviews/me - Own reviews with their moderation status
- DELETE /reviews/{review_id} - Delete a review (author or admin)
- GET /admin/reviews - Moderation queue (admin)
- PATCH /admin/reviews/{review_id}/approve - Approve a review (admin)
"""

from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import Optional, Dict, Any
import logging

from src.config.database import get_maintainer, get_review_manager
from src.exceptions import BookWormError
from src.middleware.admin_auth import active_user_required, admin_required
from src.models.book_review_models import (
    BookReviewCreate,
    BookReviewListResponse,
    BookReviewResponse,
    ReviewStatus,
)
from src.models.user_models import UserRole
from src.services.aggregate_maintainer import AggregateMaintainer
from src.services.review_manager import ReviewManager
from src.utils.response_utils import (
    create_success_response,
    serialize_document,
    serialize_documents,
)

router = APIRouter(tags=["Book Reviews"])
logger = logging.getLogger(__name__)


@router.post(
    "/reviews",
    response_model=BookReviewResponse,
    summary="Submit book review",
)
async def submit_book_review(
    review_data: BookReviewCreate,
    user: Dict[str, Any] = Depends(active_user_required),
    maintainer: AggregateMaintainer = Depends(get_maintainer),
):
    """
    **Submit or update a review for a book**

    - Each user has at most one review per book; submitting again replaces it
    - Rating 1-5 stars plus an optional comment
    - Every submission waits for admin approval before it counts toward
      the book's average rating

    **Authentication required**

    **Request Body:**
    ```json
    {
        "book_id": "665f1c2e9b1e8a3d4c5b6a7f",
        "rating": 5,
        "comment": "Could not put it down"
    }
    ```

    **Returns:**
    - 200: The stored review (status `pending`)
    - 400: Invalid book id or rating
    - 404: Book not found
    """
    try:
        review = maintainer.record_or_update_review(
            book_id=review_data.book_id,
            user_email=user["email"],
            rating=review_data.rating,
            comment=review_data.comment,
            user_name=user.get("name"),
            user_photo=user.get("photo_url"),
        )
        return serialize_document(review)

    except (HTTPException, BookWormError):
        raise
    except Exception as e:
        logger.error(f"❌ Failed to submit review: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit review",
        )


@router.get(
    "/books/{book_id}/reviews",
    response_model=BookReviewListResponse,
    summary="List book reviews",
)
async def list_book_reviews(
    book_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    review_manager: ReviewManager = Depends(get_review_manager),
):
    """
    **Approved reviews of a book**, newest first. No authentication required.
    """
    reviews, total = review_manager.list_book_reviews(book_id, skip=skip, limit=limit)
    return {
        "reviews": serialize_documents(reviews),
        "total": total,
        "skip": skip,
        "limit": limit,
    }


@router.get("/reviews/me", response_model=BookReviewListResponse)
async def list_my_reviews(
    user: Dict[str, Any] = Depends(active_user_required),
    review_manager: ReviewManager = Depends(get_review_manager),
):
    reviews = review_manager.list_user_reviews(user["email"])
    return {
        "reviews": serialize_documents(reviews),
        "total": len(reviews),
        "skip": 0,
        "limit": len(reviews),
    }


@router.delete("/reviews/{review_id}")
async def delete_review(
    review_id: str,
    user: Dict[str, Any] = Depends(active_user_required),
    review_manager: ReviewManager = Depends(get_review_manager),
    maintainer: AggregateMaintainer = Depends(get_maintainer),
):
    """
    **Delete a review**

    Only the author or an admin can delete. The book's rating is
    recomputed afterwards.

    **Returns:**
    - 200: Deleted
    - 403: Not the author
    - 404: Review not found
    """
    review = review_manager.get_review(review_id)

    is_admin = user.get("role") == UserRole.ADMIN.value
    if review["user_email"] != user["email"] and not is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own reviews",
        )

    maintainer.delete_review(review_id)
    return create_success_response(message="Review deleted")


# ===== ADMIN MODERATION =====


@router.get("/admin/reviews", response_model=BookReviewListResponse)
async def list_reviews_for_moderation(
    review_status: Optional[ReviewStatus] = Query(
        ReviewStatus.PENDING, alias="status", description="pending or approved"
    ),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    admin: Dict[str, Any] = Depends(admin_required),
    review_manager: ReviewManager = Depends(get_review_manager),
):
    reviews, total = review_manager.list_by_status(review_status, skip=skip, limit=limit)
    return {
        "reviews": serialize_documents(reviews),
        "total": total,
        "skip": skip,
        "limit": limit,
    }


@router.patch("/admin/reviews/{review_id}/approve", response_model=BookReviewResponse)
async def approve_review(
    review_id: str,
    admin: Dict[str, Any] = Depends(admin_required),
    maintainer: AggregateMaintainer = Depends(get_maintainer),
    review_manager: ReviewManager = Depends(get_review_manager),
):
    """Approve a review so it counts toward the book's rating (admin)"""
    maintainer.approve_review(review_id)
    logger.info(f"✅ Admin {admin['email']} approved review {review_id}")
    return serialize_document(review_manager.get_review(review_id))
