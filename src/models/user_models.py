"""
User Models
Profiles, roles and reading goals
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"


class UserResponse(BaseModel):
    """User profile"""

    id: str
    email: str
    name: Optional[str] = None
    photo_url: Optional[str] = None
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE
    annual_goal: int = 0
    books_read_this_year: int = 0  # Maintained by the aggregate maintainer
    joined_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None


class RegisterUserResponse(BaseModel):
    """Response of first-login registration"""

    created: bool
    user: UserResponse


class UpdateGoalRequest(BaseModel):
    annual_goal: int = Field(..., ge=0, le=1000, description="Books to read this year")


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    photo_url: Optional[str] = None


class UpdateRoleRequest(BaseModel):
    role: UserRole


class UpdateStatusRequest(BaseModel):
    status: UserStatus


class UserRoleResponse(BaseModel):
    email: str
    role: UserRole


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
    skip: int = 0
    limit: int = 20
