"""
User Routes
Registration on first login, own profile and reading goal, admin user management

Endpoints:
- POST /users - Register or log in from the token identity
- GET /users/me - Own profile
- PATCH /users/me - Edit own name / photo
- PATCH /users/me/goal - Set annual reading goal
- GET /users/role/{email} - Role lookup for the frontend route guard
- GET /admin/users - List users (admin)
- PATCH /admin/users/{user_id}/role - Change role (admin)
- PATCH /admin/users/{user_id}/status - Block / unblock (admin)
"""

from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import Optional, Dict, Any
import logging

from src.config.database import get_user_manager
from src.exceptions import BookWormError
from src.middleware.admin_auth import active_user_required, admin_required
from src.middleware.firebase_auth import get_current_user
from src.models.user_models import (
    RegisterUserResponse,
    UpdateGoalRequest,
    UpdateProfileRequest,
    UpdateRoleRequest,
    UpdateStatusRequest,
    UserListResponse,
    UserResponse,
    UserRoleResponse,
    UserStatus,
)
from src.services.user_manager import UserManager
from src.utils.response_utils import serialize_document, serialize_documents

router = APIRouter(tags=["Users"])
logger = logging.getLogger(__name__)


@router.post("/users", response_model=RegisterUserResponse, summary="Register or log in")
async def register_user(
    current_user: Dict[str, Any] = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
):
    """
    **Create the caller's user record on first login**

    Identity (email, name, picture) comes from the Firebase token.
    Calling again for an existing user only refreshes `last_login_at`.

    **Returns:**
    - 200: `{created, user}`
    - 403: Account blocked
    """
    try:
        created, user = user_manager.register_or_login(
            email=current_user["email"],
            name=current_user.get("name"),
            photo_url=current_user.get("picture"),
        )
        if user.get("status") == UserStatus.BLOCKED.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Your account has been blocked",
            )
        return {"created": created, "user": serialize_document(user)}

    except (HTTPException, BookWormError):
        raise
    except Exception as e:
        logger.error(f"❌ Failed to register user: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register user",
        )


@router.get("/users/me", response_model=UserResponse)
async def get_my_profile(user: Dict[str, Any] = Depends(active_user_required)):
    return serialize_document(user)


@router.patch("/users/me", response_model=UserResponse)
async def update_my_profile(
    request: UpdateProfileRequest,
    user: Dict[str, Any] = Depends(active_user_required),
    user_manager: UserManager = Depends(get_user_manager),
):
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    updated = user_manager.update_profile(user["email"], changes)
    return serialize_document(updated)


@router.patch("/users/me/goal", response_model=UserResponse)
async def set_my_goal(
    request: UpdateGoalRequest,
    user: Dict[str, Any] = Depends(active_user_required),
    user_manager: UserManager = Depends(get_user_manager),
):
    """Set how many books the caller wants to read this year"""
    updated = user_manager.set_goal(user["email"], request.annual_goal)
    logger.info(f"🎯 {user['email']} annual goal set to {request.annual_goal}")
    return serialize_document(updated)


@router.get("/users/role/{email}", response_model=UserRoleResponse)
async def get_user_role(
    email: str,
    current_user: Dict[str, Any] = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
):
    """Role lookup used by the frontend to show admin pages"""
    role = user_manager.get_role(email.lower())
    return {"email": email.lower(), "role": role}


# ===== ADMIN =====


@router.get("/admin/users", response_model=UserListResponse)
async def list_users(
    search: Optional[str] = Query(None, description="Match email or name"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    admin: Dict[str, Any] = Depends(admin_required),
    user_manager: UserManager = Depends(get_user_manager),
):
    users, total = user_manager.list_users(search=search, skip=skip, limit=limit)
    return {
        "users": serialize_documents(users),
        "total": total,
        "skip": skip,
        "limit": limit,
    }


@router.patch("/admin/users/{user_id}/role", response_model=UserResponse)
async def change_user_role(
    user_id: str,
    request: UpdateRoleRequest,
    admin: Dict[str, Any] = Depends(admin_required),
    user_manager: UserManager = Depends(get_user_manager),
):
    user = user_manager.set_role(user_id, request.role)
    return serialize_document(user)


@router.patch("/admin/users/{user_id}/status", response_model=UserResponse)
async def change_user_status(
    user_id: str,
    request: UpdateStatusRequest,
    admin: Dict[str, Any] = Depends(admin_required),
    user_manager: UserManager = Depends(get_user_manager),
):
    """
    **Block or unblock a user**

    Admins cannot block themselves.
    """
    target = user_manager.get_user_by_id(user_id)
    if target["email"] == admin["email"] and request.status == UserStatus.BLOCKED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot block your own account",
        )
    user = user_manager.set_status(user_id, request.status)
    return serialize_document(user)
