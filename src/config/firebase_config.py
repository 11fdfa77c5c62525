"""
Firebase Admin SDK Configuration
Backend verification of the frontend's Firebase ID tokens
"""

import os
from typing import Any, Dict

import firebase_admin
from firebase_admin import auth, credentials

from src.utils.logger import setup_logger

logger = setup_logger()


class FirebaseConfig:
    """Firebase Admin SDK Configuration Manager"""

    def __init__(self):
        self.app = None
        self._initialize_firebase()

    def _initialize_firebase(self):
        """Initialize Firebase Admin SDK"""
        try:
            if firebase_admin._apps:
                self.app = firebase_admin.get_app()
                logger.info("✅ Firebase Admin SDK already initialized")
                return

            # Try to initialize from service account file (Google standard)
            service_account_path = os.getenv(
                "GOOGLE_APPLICATION_CREDENTIALS"
            ) or os.getenv("FIREBASE_SERVICE_ACCOUNT_PATH")

            if service_account_path and os.path.exists(service_account_path):
                cred = credentials.Certificate(service_account_path)
                self.app = firebase_admin.initialize_app(cred)
                logger.info("✅ Firebase Admin SDK initialized with service account file")
                return

            project_id = os.getenv("FIREBASE_PROJECT_ID")
            private_key = os.getenv("FIREBASE_PRIVATE_KEY", "").replace("\\n", "\n")
            client_email = os.getenv("FIREBASE_CLIENT_EMAIL")

            if not (project_id and private_key and client_email):
                logger.warning(
                    "⚠️ Firebase credentials not configured - token verification disabled"
                )
                self.app = None
                return

            cred = credentials.Certificate(
                {
                    "type": "service_account",
                    "project_id": project_id,
                    "private_key_id": os.getenv("FIREBASE_PRIVATE_KEY_ID"),
                    "private_key": private_key,
                    "client_email": client_email,
                    "client_id": os.getenv("FIREBASE_CLIENT_ID"),
                    "token_uri": "https://oauth2.googleapis.com/token",
                }
            )
            self.app = firebase_admin.initialize_app(cred)
            logger.info("✅ Firebase Admin SDK initialized with environment variables")

        except (ValueError, IOError) as e:
            logger.warning(f"⚠️ Failed to initialize Firebase Admin SDK: {e}")
            self.app = None

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify a Firebase ID token.

        Raises:
            firebase_admin.auth.InvalidIdTokenError and subclasses
            RuntimeError: if Firebase is not configured
        """
        if not self.app:
            raise RuntimeError("Firebase Admin SDK is not configured")
        return auth.verify_id_token(token, app=self.app)


# Global Firebase config instance
firebase_config = FirebaseConfig()
