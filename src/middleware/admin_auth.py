"""
Access guard dependencies

Checks the caller's record in the users collection: blocked users are
rejected everywhere, and admin routes additionally require role=admin.
"""

import logging
from typing import Any, Dict

from fastapi import Depends, HTTPException, status

from src.config.database import get_user_manager
from src.middleware.firebase_auth import get_current_user
from src.models.user_models import UserRole, UserStatus
from src.services.user_manager import UserManager

logger = logging.getLogger(__name__)


async def active_user_required(
    current_user: Dict[str, Any] = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
) -> Dict[str, Any]:
    """
    Dependency returning the caller's user document.
    401 if not registered yet, 403 if blocked.
    """
    user = user_manager.get_by_email(current_user["email"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not registered",
        )

    if user.get("status") == UserStatus.BLOCKED.value:
        logger.warning(f"⚠️ Blocked user {user['email']} attempted access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been blocked",
        )

    return user


async def admin_required(
    user: Dict[str, Any] = Depends(active_user_required),
) -> Dict[str, Any]:
    """
    Dependency requiring role=admin on an active user
    """
    if user.get("role") != UserRole.ADMIN.value:
        logger.warning(f"⚠️ Non-admin user {user['email']} attempted admin action")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin permission required",
        )

    logger.info(f"✅ Admin access granted for user: {user['email']}")
    return user
