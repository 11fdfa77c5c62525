"""
Genre Manager Service
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from src.database.record_store import GENRES, RecordStore
from src.exceptions import ConflictError, NotFoundError
from src.models.genre_models import GenreCreate, GenreUpdate
from src.utils.id_utils import parse_object_id

logger = logging.getLogger(__name__)


class GenreManager:
    """Genre names are unique ignoring case (name_lower carries the unique index)"""

    def __init__(self, store: RecordStore):
        self.store = store

    def list_genres(self) -> List[Dict[str, Any]]:
        return self.store.find(GENRES, {}, sort=[("name", 1)])

    def create_genre(self, data: GenreCreate) -> Dict[str, Any]:
        name = data.name.strip()
        if self.store.find_one(GENRES, {"name_lower": name.lower()}):
            raise ConflictError(f"Genre already exists: {name}", details={"name": name})

        genre = self.store.insert(
            GENRES,
            {
                "name": name,
                "name_lower": name.lower(),
                "description": data.description,
                "created_at": datetime.now(timezone.utc),
            },
        )
        logger.info(f"🏷️ Genre created: {name}")
        return genre

    def update_genre(self, genre_id: str, data: GenreUpdate) -> Dict[str, Any]:
        genre_oid = parse_object_id(genre_id, "genre_id")
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            changes["name_lower"] = changes["name"].lower()
            clash = self.store.find_one(
                GENRES, {"name_lower": changes["name_lower"], "_id": {"$ne": genre_oid}}
            )
            if clash:
                raise ConflictError(
                    f"Genre already exists: {changes['name']}",
                    details={"name": changes["name"]},
                )

        if not changes:
            genre = self.store.find_one(GENRES, {"_id": genre_oid})
        else:
            genre = self.store.update(GENRES, {"_id": genre_oid}, changes)
        if genre is None:
            raise NotFoundError("Genre", genre_id)
        return genre

    def delete_genre(self, genre_id: str):
        result = self.store.delete_one(GENRES, {"_id": parse_object_id(genre_id, "genre_id")})
        if not result.deleted:
            raise NotFoundError("Genre", genre_id)
        logger.info(f"🗑️ Genre {genre_id} deleted")
        return result
