"""
Book Review Models
Models for book reviews and moderation
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class ReviewStatus(str, Enum):
    """Moderation state; only approved reviews count toward the rating"""

    PENDING = "pending"
    APPROVED = "approved"


class BookReviewCreate(BaseModel):
    """Create or update own review"""

    book_id: str = Field(..., description="Book being reviewed")
    rating: int = Field(..., ge=1, le=5, description="Rating 1-5 stars")
    comment: str = Field("", max_length=2000, description="Review text")


class BookReviewResponse(BaseModel):
    """Book review response"""

    id: str
    book_id: str
    book_title: Optional[str] = None
    user_email: str
    user_name: Optional[str] = None
    user_photo: Optional[str] = None
    rating: int
    comment: str = ""
    status: ReviewStatus
    created_at: Optional[datetime] = None
    updated_at: datetime


class BookReviewListResponse(BaseModel):
    """List of book reviews"""

    reviews: List[BookReviewResponse]
    total: int
    skip: int = 0
    limit: int = 20
