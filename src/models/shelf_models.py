"""
Shelf Models - User's reading shelves (want-to-read / reading / read)
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class ShelfType(str, Enum):
    WANT_TO_READ = "want-to-read"
    READING = "reading"
    READ = "read"


class ShelfEntryCreate(BaseModel):
    """Put a book on one of my shelves"""

    book_id: str = Field(..., description="Book ID to shelve")
    shelf_type: ShelfType
    progress: Optional[int] = Field(None, description="Pages read; ignored for 'read'")


class ProgressUpdate(BaseModel):
    progress: int = Field(..., ge=0, description="Pages read so far")


class ShelfEntryResponse(BaseModel):
    """Shelf entry with the book's display fields copied in"""

    id: str
    user_email: str
    book_id: str
    shelf_type: ShelfType
    progress: int = 0

    # Book snapshot
    title: Optional[str] = None
    author: Optional[str] = None
    genre: Optional[str] = None
    cover_image: Optional[str] = None
    total_pages: int = 0

    finished_at: Optional[datetime] = None  # Set while on the read shelf
    created_at: Optional[datetime] = None
    updated_at: datetime


class ShelfListResponse(BaseModel):
    entries: List[ShelfEntryResponse]
    total: int
    filters: dict = Field(
        default_factory=dict,
        description="Applied filters: {shelf_type}",
    )
