"""
Firebase Authentication Middleware
Resolves the caller's identity (email) from a Firebase ID token
"""

import os
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth

from src.config.firebase_config import firebase_config
from src.utils.logger import setup_logger

logger = setup_logger()

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def _is_development() -> bool:
    return os.getenv("ENV", "").lower() in ["development", "dev"]


def verify_firebase_token(token: str) -> Dict[str, Any]:
    """
    Verify a Firebase ID token and return its claims.

    In development, "dev_<email>" tokens are accepted without Firebase
    (e.g. "dev_reader@example.com"); a bare "dev_token" maps to
    dev@example.com.
    """
    if _is_development() and token.startswith("dev_"):
        email = token[len("dev_"):] if "@" in token else "dev@example.com"
        logger.info(f"🔧 Development mode: mock token for {email}")
        return {
            "uid": f"dev_{email}",
            "email": email,
            "name": email.split("@")[0],
            "picture": None,
            "email_verified": True,
        }

    try:
        return firebase_config.verify_token(token)
    except auth.ExpiredIdTokenError:
        logger.warning("❌ Expired Firebase token provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token has expired",
        )
    except auth.InvalidIdTokenError:
        logger.warning("❌ Invalid Firebase token provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        )
    except RuntimeError as e:
        logger.error(f"❌ Token verification unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service not configured",
        )
    except (ValueError, auth.CertificateFetchError) as e:
        logger.error(f"❌ Token verification error: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication failed"
        )


def extract_user_info(decoded_token: Dict[str, Any]) -> Dict[str, Any]:
    """Standardized identity from Firebase claims"""
    email = decoded_token.get("email")
    if not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no email claim",
        )
    return {
        "uid": decoded_token.get("uid") or decoded_token.get("user_id"),
        "email": email.lower(),
        "name": decoded_token.get("name"),
        "picture": decoded_token.get("picture"),
    }


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """FastAPI dependency to get the authenticated caller's identity"""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token required",
        )
    return extract_user_info(verify_firebase_token(credentials.credentials))

