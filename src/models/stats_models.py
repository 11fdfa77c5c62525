"""
Dashboard statistics models
"""

from pydantic import BaseModel, Field
from typing import List, Dict


class GenreCount(BaseModel):
    genre: str
    count: int


class MonthCount(BaseModel):
    month: int = Field(..., ge=1, le=12)
    count: int


class TopBook(BaseModel):
    id: str
    title: str
    author: str
    shelved_count: int = 0
    average_rating: float = 0.0


class UserStatsResponse(BaseModel):
    """Reader dashboard"""

    shelves: Dict[str, int]
    books_read_this_year: int
    annual_goal: int
    goal_progress: float  # Percent, 0-100
    total_pages_read: int
    pages_in_progress: int
    genres_read: List[GenreCount]
    monthly_finished: List[MonthCount]


class AdminStatsResponse(BaseModel):
    """Admin dashboard"""

    total_users: int
    total_books: int
    total_reviews: int
    pending_reviews: int
    total_shelf_entries: int
    total_genres: int
    total_tutorials: int
    books_per_genre: List[GenreCount]
    top_shelved_books: List[TopBook]
