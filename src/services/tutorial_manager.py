"""
Tutorial Manager Service
Reading-tips videos shown on the tutorials page
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from src.database.record_store import TUTORIALS, RecordStore
from src.exceptions import NotFoundError
from src.models.tutorial_models import TutorialCreate, TutorialUpdate
from src.utils.id_utils import parse_object_id

logger = logging.getLogger(__name__)


class TutorialManager:
    def __init__(self, store: RecordStore):
        self.store = store

    def list_tutorials(self) -> List[Dict[str, Any]]:
        return self.store.find(TUTORIALS, {}, sort=[("created_at", -1)])

    def create_tutorial(self, data: TutorialCreate) -> Dict[str, Any]:
        doc = data.model_dump()
        doc["created_at"] = datetime.now(timezone.utc)
        tutorial = self.store.insert(TUTORIALS, doc)
        logger.info(f"🎬 Tutorial created: {tutorial['title']}")
        return tutorial

    def update_tutorial(self, tutorial_id: str, data: TutorialUpdate) -> Dict[str, Any]:
        tutorial_oid = parse_object_id(tutorial_id, "tutorial_id")
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if changes:
            tutorial = self.store.update(TUTORIALS, {"_id": tutorial_oid}, changes)
        else:
            tutorial = self.store.find_one(TUTORIALS, {"_id": tutorial_oid})
        if tutorial is None:
            raise NotFoundError("Tutorial", tutorial_id)
        return tutorial

    def delete_tutorial(self, tutorial_id: str):
        result = self.store.delete_one(
            TUTORIALS, {"_id": parse_object_id(tutorial_id, "tutorial_id")}
        )
        if not result.deleted:
            raise NotFoundError("Tutorial", tutorial_id)
        return result
