"""
ObjectId helpers for path parameters and stored references
"""

from bson import ObjectId
from bson.errors import InvalidId

from src.exceptions import InvalidInputError


def parse_object_id(value, field: str = "id") -> ObjectId:
    """
    Convert a 24-hex string to ObjectId.

    Raises:
        InvalidInputError: if the value is not a valid ObjectId
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise InvalidInputError(f"Invalid {field} format", field=field, value=value)


def normalize_object_id(value, field: str = "id") -> str:
    """Validate and return the canonical string form used in cross references"""
    return str(parse_object_id(value, field))
