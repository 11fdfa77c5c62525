"""
Dashboard statistics routes
"""

from fastapi import APIRouter, Depends
from typing import Dict, Any

from src.config.database import get_stats_service
from src.middleware.admin_auth import active_user_required, admin_required
from src.models.stats_models import AdminStatsResponse, UserStatsResponse
from src.services.stats_service import StatsService

router = APIRouter(tags=["Stats"])


@router.get("/stats/me", response_model=UserStatsResponse)
async def my_stats(
    user: Dict[str, Any] = Depends(active_user_required),
    stats_service: StatsService = Depends(get_stats_service),
):
    """
    **Reader dashboard**

    Shelf counts, reading goal progress, pages read, favourite genres and
    books finished per month this year.
    """
    return stats_service.user_stats(user["email"])


@router.get("/admin/stats", response_model=AdminStatsResponse)
async def admin_stats(
    admin: Dict[str, Any] = Depends(admin_required),
    stats_service: StatsService = Depends(get_stats_service),
):
    return stats_service.admin_stats()
