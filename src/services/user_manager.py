"""
User Manager Service
First-login registration, profiles, roles and reading goals
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from src.database.record_store import USERS, RecordStore
from src.exceptions import NotFoundError
from src.models.user_models import UserRole, UserStatus
from src.utils.id_utils import parse_object_id

logger = logging.getLogger(__name__)


class UserManager:
    """
    Users are keyed by email. books_read_this_year is owned by the
    aggregate maintainer and never written here after registration.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def register_or_login(
        self,
        email: str,
        name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> Tuple[bool, Dict[str, Any]]:
        """
        Create the user on first login, otherwise just stamp last_login_at.

        Returns:
            (created, user document)
        """
        now = datetime.now(timezone.utc)
        result = self.store.upsert(
            USERS,
            {"email": email},
            set_doc={"last_login_at": now},
            set_on_insert={
                "name": name or email.split("@")[0],
                "photo_url": photo_url,
                "role": UserRole.USER.value,
                "status": UserStatus.ACTIVE.value,
                "annual_goal": 0,
                "books_read_this_year": 0,
                "joined_at": now,
            },
        )
        if result.created:
            logger.info(f"👤 New user registered: {email}")
        return result.created, result.document

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.store.find_one(USERS, {"email": email})

    def get_user(self, email: str) -> Dict[str, Any]:
        user = self.get_by_email(email)
        if not user:
            raise NotFoundError("User", email)
        return user

    def get_user_by_id(self, user_id: str) -> Dict[str, Any]:
        user = self.store.find_one(USERS, {"_id": parse_object_id(user_id, "user_id")})
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def get_role(self, email: str) -> UserRole:
        user = self.get_user(email)
        return UserRole(user.get("role", UserRole.USER.value))

    def list_users(
        self, search: Optional[str] = None, skip: int = 0, limit: int = 20
    ) -> Tuple[List[Dict[str, Any]], int]:
        query: Dict[str, Any] = {}
        if search:
            pattern = re.escape(search)
            query["$or"] = [
                {"email": {"$regex": pattern, "$options": "i"}},
                {"name": {"$regex": pattern, "$options": "i"}},
            ]
        total = self.store.count(USERS, query)
        users = self.store.find(
            USERS, query, sort=[("joined_at", -1)], skip=skip, limit=limit
        )
        return users, total

    def set_role(self, user_id: str, role: UserRole) -> Dict[str, Any]:
        user = self.store.update(
            USERS, {"_id": parse_object_id(user_id, "user_id")}, {"role": role.value}
        )
        if user is None:
            raise NotFoundError("User", user_id)
        logger.info(f"🛡️ User {user['email']} role set to {role.value}")
        return user

    def set_status(self, user_id: str, status: UserStatus) -> Dict[str, Any]:
        user = self.store.update(
            USERS, {"_id": parse_object_id(user_id, "user_id")}, {"status": status.value}
        )
        if user is None:
            raise NotFoundError("User", user_id)
        logger.info(f"🛡️ User {user['email']} status set to {status.value}")
        return user

    def set_goal(self, email: str, annual_goal: int) -> Dict[str, Any]:
        user = self.store.update(USERS, {"email": email}, {"annual_goal": annual_goal})
        if user is None:
            raise NotFoundError("User", email)
        return user

    def update_profile(self, email: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if not changes:
            return self.get_user(email)
        user = self.store.update(USERS, {"email": email}, changes)
        if user is None:
            raise NotFoundError("User", email)
        return user
