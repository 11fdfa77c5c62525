"""
Shelf Manager Service
Read side of reading shelves. Writes go through the aggregate maintainer.
"""

from typing import Any, Dict, List, Optional

from src.database.record_store import SHELVES, RecordStore
from src.exceptions import NotFoundError
from src.models.shelf_models import ShelfType
from src.utils.id_utils import parse_object_id


class ShelfManager:
    def __init__(self, store: RecordStore):
        self.store = store

    def find_entry(self, entry_id: str) -> Optional[Dict[str, Any]]:
        return self.store.find_one(
            SHELVES, {"_id": parse_object_id(entry_id, "shelf_entry_id")}
        )

    def get_entry(self, entry_id: str) -> Dict[str, Any]:
        entry = self.find_entry(entry_id)
        if not entry:
            raise NotFoundError("Shelf entry", entry_id)
        return entry

    def list_user_shelves(
        self, user_email: str, shelf_type: Optional[ShelfType] = None
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"user_email": user_email}
        if shelf_type:
            query["shelf_type"] = shelf_type.value
        return self.store.find(SHELVES, query, sort=[("updated_at", -1)])
