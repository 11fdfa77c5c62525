"""
Genre Routes
"""

from fastapi import APIRouter, Depends, status
from typing import List, Dict, Any

from src.config.database import get_genre_manager
from src.middleware.admin_auth import admin_required
from src.models.genre_models import GenreCreate, GenreResponse, GenreUpdate
from src.services.genre_manager import GenreManager
from src.utils.response_utils import (
    create_success_response,
    serialize_document,
    serialize_documents,
)

router = APIRouter(prefix="/genres", tags=["Genres"])


@router.get("", response_model=List[GenreResponse])
async def list_genres(genre_manager: GenreManager = Depends(get_genre_manager)):
    return serialize_documents(genre_manager.list_genres())


@router.post("", response_model=GenreResponse, status_code=status.HTTP_201_CREATED)
async def create_genre(
    genre_data: GenreCreate,
    admin: Dict[str, Any] = Depends(admin_required),
    genre_manager: GenreManager = Depends(get_genre_manager),
):
    """Create a genre (admin). Names are unique ignoring case; duplicates return 409."""
    return serialize_document(genre_manager.create_genre(genre_data))


@router.patch("/{genre_id}", response_model=GenreResponse)
async def update_genre(
    genre_id: str,
    genre_data: GenreUpdate,
    admin: Dict[str, Any] = Depends(admin_required),
    genre_manager: GenreManager = Depends(get_genre_manager),
):
    return serialize_document(genre_manager.update_genre(genre_id, genre_data))


@router.delete("/{genre_id}")
async def delete_genre(
    genre_id: str,
    admin: Dict[str, Any] = Depends(admin_required),
    genre_manager: GenreManager = Depends(get_genre_manager),
):
    genre_manager.delete_genre(genre_id)
    return create_success_response(message="Genre deleted")
