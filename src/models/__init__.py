"""
Request / response models for the BookWorm API
"""

from .user_models import UserRole, UserStatus
from .book_review_models import ReviewStatus
from .shelf_models import ShelfType

__all__ = ["UserRole", "UserStatus", "ReviewStatus", "ShelfType"]
