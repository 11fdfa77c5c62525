"""
Book Routes
Public catalogue browsing and admin catalogue management

Endpoints:
- GET /books - Search / filter / sort the catalogue
- GET /books/{book_id} - Book detail
- POST /books - Create a book (admin)
- PATCH /books/{book_id} - Edit a book (admin)
- DELETE /books/{book_id} - Delete a book with its reviews and shelf entries (admin)
"""

from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import Optional, Dict, Any
import logging

from src.config.database import get_book_manager
from src.exceptions import BookWormError
from src.middleware.admin_auth import admin_required
from src.models.book_models import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookSort,
    BookUpdate,
)
from src.services.book_manager import BookManager
from src.utils.response_utils import (
    create_success_response,
    serialize_document,
    serialize_documents,
)

router = APIRouter(prefix="/books", tags=["Books"])
logger = logging.getLogger(__name__)


@router.get("", response_model=BookListResponse, summary="Browse books")
async def list_books(
    search: Optional[str] = Query(None, description="Title or author contains"),
    genre: Optional[str] = Query(None, description="Exact genre name"),
    sort: BookSort = Query(BookSort.NEWEST),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    book_manager: BookManager = Depends(get_book_manager),
):
    """
    **Browse the catalogue**

    - `search`: case-insensitive match on title or author
    - `genre`: filter by genre
    - `sort`: newest | rating | popular | title

    No authentication required.
    """
    books, total = book_manager.list_books(
        search=search, genre=genre, sort=sort, skip=skip, limit=limit
    )
    return {
        "books": serialize_documents(books),
        "total": total,
        "skip": skip,
        "limit": limit,
    }


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(book_id: str, book_manager: BookManager = Depends(get_book_manager)):
    return serialize_document(book_manager.get_book(book_id))


@router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create book",
)
async def create_book(
    book_data: BookCreate,
    admin: Dict[str, Any] = Depends(admin_required),
    book_manager: BookManager = Depends(get_book_manager),
):
    """
    **Add a book to the catalogue** (admin)

    `average_rating`, `total_reviews` and `shelved_count` start at 0 and
    are maintained by the server.
    """
    try:
        book = book_manager.create_book(book_data)
        return serialize_document(book)

    except (HTTPException, BookWormError):
        raise
    except Exception as e:
        logger.error(f"❌ Failed to create book: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create book",
        )


@router.patch("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: str,
    book_data: BookUpdate,
    admin: Dict[str, Any] = Depends(admin_required),
    book_manager: BookManager = Depends(get_book_manager),
):
    return serialize_document(book_manager.update_book(book_id, book_data))


@router.delete("/{book_id}")
async def delete_book(
    book_id: str,
    admin: Dict[str, Any] = Depends(admin_required),
    book_manager: BookManager = Depends(get_book_manager),
):
    """
    **Delete a book** (admin)

    Removes the book's reviews and shelf entries first. Readers who had the
    book on their read shelf lose it from `books_read_this_year`.
    Deleting a book that no longer exists succeeds with zero counts.
    """
    result = book_manager.delete_book(book_id)
    logger.info(f"🗑️ Admin {admin['email']} deleted book {book_id}")
    return create_success_response(
        data={
            "book_deleted": result.book.deleted,
            "reviews_deleted": result.reviews.deleted_count,
            "shelf_entries_deleted": result.shelf_entries.deleted_count,
        },
        message="Book deleted",
    )
