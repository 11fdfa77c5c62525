"""
Shelf Routes
The caller's reading shelves: want-to-read, reading, read

Endpoints:
- POST /shelves - Put a book on a shelf (or move it)
- GET /shelves/me - My shelf entries, optionally one shelf
- PATCH /shelves/{entry_id}/progress - Update pages read
- DELETE /shelves/{entry_id} - Take a book off my shelves
"""

from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import Optional, Dict, Any
import logging

from src.config.database import get_book_manager, get_maintainer, get_shelf_manager
from src.exceptions import BookWormError
from src.middleware.admin_auth import active_user_required
from src.models.book_models import BookSnapshot
from src.models.shelf_models import (
    ProgressUpdate,
    ShelfEntryCreate,
    ShelfEntryResponse,
    ShelfListResponse,
    ShelfType,
)
from src.services.aggregate_maintainer import AggregateMaintainer
from src.services.book_manager import BookManager
from src.services.shelf_manager import ShelfManager
from src.utils.response_utils import (
    create_success_response,
    serialize_document,
    serialize_documents,
)

router = APIRouter(prefix="/shelves", tags=["Shelves"])
logger = logging.getLogger(__name__)


def _ensure_owner(entry: Dict[str, Any], user: Dict[str, Any]):
    if entry["user_email"] != user["email"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This shelf entry belongs to another user",
        )


@router.post("", response_model=ShelfEntryResponse)
async def shelve_book(
    request: ShelfEntryCreate,
    user: Dict[str, Any] = Depends(active_user_required),
    book_manager: BookManager = Depends(get_book_manager),
    maintainer: AggregateMaintainer = Depends(get_maintainer),
):
    """
    **Put a book on one of my shelves**

    - A book sits on at most one of the caller's shelves; posting again moves it
    - `read` sets progress to the book's page count
    - Moving a book onto or off `read` updates `books_read_this_year`

    **Returns:**
    - 200: The shelf entry
    - 404: Book not found
    """
    try:
        book = book_manager.get_book(request.book_id)
        entry = maintainer.upsert_shelf_entry(
            user_email=user["email"],
            book_id=request.book_id,
            shelf_type=request.shelf_type,
            progress=request.progress,
            book_snapshot=BookSnapshot.from_document(book),
        )
        return serialize_document(entry)

    except (HTTPException, BookWormError):
        raise
    except Exception as e:
        logger.error(f"❌ Failed to shelve book {request.book_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update shelf",
        )


@router.get("/me", response_model=ShelfListResponse)
async def list_my_shelves(
    shelf_type: Optional[ShelfType] = Query(None, description="Only this shelf"),
    user: Dict[str, Any] = Depends(active_user_required),
    shelf_manager: ShelfManager = Depends(get_shelf_manager),
):
    entries = shelf_manager.list_user_shelves(user["email"], shelf_type)
    return {
        "entries": serialize_documents(entries),
        "total": len(entries),
        "filters": {"shelf_type": shelf_type.value if shelf_type else None},
    }


@router.patch("/{entry_id}/progress", response_model=ShelfEntryResponse)
async def update_progress(
    entry_id: str,
    request: ProgressUpdate,
    user: Dict[str, Any] = Depends(active_user_required),
    shelf_manager: ShelfManager = Depends(get_shelf_manager),
    maintainer: AggregateMaintainer = Depends(get_maintainer),
):
    """
    **Record pages read**

    Reaching the last page moves the book to the `read` shelf.
    """
    _ensure_owner(shelf_manager.get_entry(entry_id), user)
    entry = maintainer.advance_progress(entry_id, request.progress)
    return serialize_document(entry)


@router.delete("/{entry_id}")
async def remove_from_shelf(
    entry_id: str,
    user: Dict[str, Any] = Depends(active_user_required),
    shelf_manager: ShelfManager = Depends(get_shelf_manager),
    maintainer: AggregateMaintainer = Depends(get_maintainer),
):
    """Take a book off my shelves. Removing an entry that is already gone succeeds."""
    entry = shelf_manager.find_entry(entry_id)
    if entry is None:
        return create_success_response(data={"deleted": False}, message="Already removed")

    _ensure_owner(entry, user)
    result = maintainer.remove_shelf_entry(entry_id)
    return create_success_response(
        data={"deleted": result.deleted}, message="Removed from shelf"
    )
