"""
Tutorial Routes
Reading-tips videos shown on the tutorials page
"""

from fastapi import APIRouter, Depends, status
from typing import List, Dict, Any

from src.config.database import get_tutorial_manager
from src.middleware.admin_auth import admin_required
from src.models.tutorial_models import TutorialCreate, TutorialResponse, TutorialUpdate
from src.services.tutorial_manager import TutorialManager
from src.utils.response_utils import (
    create_success_response,
    serialize_document,
    serialize_documents,
)

router = APIRouter(prefix="/tutorials", tags=["Tutorials"])


@router.get("", response_model=List[TutorialResponse])
async def list_tutorials(
    tutorial_manager: TutorialManager = Depends(get_tutorial_manager),
):
    return serialize_documents(tutorial_manager.list_tutorials())


@router.post("", response_model=TutorialResponse, status_code=status.HTTP_201_CREATED)
async def create_tutorial(
    tutorial_data: TutorialCreate,
    admin: Dict[str, Any] = Depends(admin_required),
    tutorial_manager: TutorialManager = Depends(get_tutorial_manager),
):
    return serialize_document(tutorial_manager.create_tutorial(tutorial_data))


@router.patch("/{tutorial_id}", response_model=TutorialResponse)
async def update_tutorial(
    tutorial_id: str,
    tutorial_data: TutorialUpdate,
    admin: Dict[str, Any] = Depends(admin_required),
    tutorial_manager: TutorialManager = Depends(get_tutorial_manager),
):
    return serialize_document(tutorial_manager.update_tutorial(tutorial_id, tutorial_data))


@router.delete("/{tutorial_id}")
async def delete_tutorial(
    tutorial_id: str,
    admin: Dict[str, Any] = Depends(admin_required),
    tutorial_manager: TutorialManager = Depends(get_tutorial_manager),
):
    tutorial_manager.delete_tutorial(tutorial_id)
    return create_success_response(message="Tutorial deleted")
