"""
Response utilities for API endpoints
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId


def serialize_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Replace MongoDB _id with a string id"""
    if doc is None:
        return None
    data = {key: value for key, value in doc.items() if key != "_id"}
    if "_id" in doc:
        data["id"] = str(doc["_id"])
    for key, value in data.items():
        if isinstance(value, ObjectId):
            data[key] = str(value)
    return data


def serialize_documents(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_document(doc) for doc in docs]


def create_success_response(
    data: Any = None, message: str = "Success", code: str = "SUCCESS"
) -> Dict[str, Any]:
    """Create standardized success response"""
    return {
        "success": True,
        "code": code,
        "message": message,
        "data": data,
    }
