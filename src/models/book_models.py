"""
Pydantic Models for the book catalogue
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


class BookSort(str, Enum):
    NEWEST = "newest"
    RATING = "rating"
    POPULAR = "popular"  # Most shelved
    TITLE = "title"


class BookCreate(BaseModel):
    """Admin: add a book to the catalogue"""

    title: str = Field(..., min_length=1, max_length=300)
    author: str = Field(..., min_length=1, max_length=200)
    genre: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=5000)
    cover_image: Optional[str] = Field(None, description="Cover image URL")
    total_pages: int = Field(0, ge=0)


class BookUpdate(BaseModel):
    """Admin: edit catalogue fields. Rating and shelf counters are not editable."""

    title: Optional[str] = Field(None, min_length=1, max_length=300)
    author: Optional[str] = Field(None, min_length=1, max_length=200)
    genre: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    cover_image: Optional[str] = None
    total_pages: Optional[int] = Field(None, ge=0)


class BookResponse(BaseModel):
    id: str
    title: str
    author: str
    genre: str
    description: str = ""
    cover_image: Optional[str] = None
    total_pages: int = 0

    # Derived fields
    average_rating: float = 0.0
    total_reviews: int = 0
    shelved_count: int = 0

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookListResponse(BaseModel):
    books: List[BookResponse]
    total: int
    skip: int
    limit: int


class BookSnapshot(BaseModel):
    """Display fields copied onto a shelf entry"""

    title: str = ""
    author: str = ""
    genre: str = ""
    cover_image: Optional[str] = None
    total_pages: int = Field(0, ge=0)

    @classmethod
    def from_document(cls, book: Dict[str, Any]) -> "BookSnapshot":
        return cls(
            title=book.get("title", ""),
            author=book.get("author", ""),
            genre=book.get("genre", ""),
            cover_image=book.get("cover_image"),
            total_pages=book.get("total_pages") or 0,
        )
