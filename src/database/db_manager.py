import logging
from typing import Optional

import pymongo
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.errors import PyMongoError

from src.core.config import APP_CONFIG
from src.exceptions import UpstreamError
from src.utils.logger import setup_logger

logger = setup_logger()


class DBManager:
    """
    Owns the process-wide MongoDB client for the BookWorm database.

    Created once in the FastAPI lifespan, stored on app.state and handed
    to request handlers through the get_db_manager dependency.
    """

    def __init__(
        self,
        mongo_uri: Optional[str] = None,
        db_name: Optional[str] = None,
        client: Optional[pymongo.MongoClient] = None,
    ):
        self.mongo_uri = mongo_uri or APP_CONFIG["mongodb_uri"]
        self.db_name = db_name or APP_CONFIG["mongodb_name"]
        self.client = client
        self.db: Optional[Database] = client[self.db_name] if client else None

    def connect(self) -> Database:
        """
        Open the client and ping the server.

        Raises:
            UpstreamError: if the server does not answer within the timeout
        """
        if self.client is None:
            self.client = pymongo.MongoClient(
                self.mongo_uri,
                serverSelectionTimeoutMS=APP_CONFIG["mongodb_timeout_ms"],
            )
            self.db = self.client[self.db_name]

        try:
            self.client.admin.command("ping")
        except PyMongoError as e:
            logger.error(f"❌ Failed to connect to MongoDB: {e}")
            raise UpstreamError(f"MongoDB unreachable: {e}", operation="ping")

        logger.info(f"✅ Connected to MongoDB database: {self.db_name}")
        return self.db

    def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"⚠️ MongoDB ping failed: {e}")
            return False

    def create_indexes(self):
        """
        Create indexes for the six collections.
        Safe to run on every startup.
        """
        db = self.db
        try:
            db["users"].create_index("email", unique=True)
            db["users"].create_index("role")

            db["books"].create_index("genre")
            db["books"].create_index([("created_at", DESCENDING)])
            db["books"].create_index([("shelved_count", DESCENDING)])

            # One review per (book, user) and one shelf entry per (user, book)
            db["reviews"].create_index(
                [("book_id", ASCENDING), ("user_email", ASCENDING)], unique=True
            )
            db["reviews"].create_index([("status", ASCENDING), ("updated_at", DESCENDING)])
            db["shelves"].create_index(
                [("user_email", ASCENDING), ("book_id", ASCENDING)], unique=True
            )
            db["shelves"].create_index("book_id")

            db["genres"].create_index("name_lower", unique=True)

            logger.info("✅ BookWorm indexes created successfully")
        except PyMongoError as e:
            logger.error(f"❌ Error creating indexes: {e}")
            raise UpstreamError(f"Index creation failed: {e}", operation="create_index")

    def close(self):
        if self.client is not None:
            self.client.close()
            logger.info("🛑 MongoDB connection closed")
        self.client = None
        self.db = None
