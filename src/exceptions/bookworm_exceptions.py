"""
Domain exceptions raised by the record store, managers and the
aggregate maintainer.

Each exception is caught by a global exception handler in app.py and
converted to a JSON error response with the matching HTTP status.
"""

from typing import Any, Dict, Optional


class BookWormError(Exception):
    """
    Base class for service errors.

    Attributes:
        message: Human-readable error message
        error_code: Stable code for frontend detection
        status_code: HTTP status used by the global handler
        details: Optional extra context (entity, id, field)
    """

    error_code = "BOOKWORM_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        """Convert to dict for JSON response"""
        return {
            "success": False,
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(BookWormError):
    """Referenced book, review, shelf entry or user does not exist"""

    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            f"{entity} not found: {entity_id}",
            details={"entity": entity, "id": str(entity_id)},
        )


class InvalidInputError(BookWormError):
    """Malformed id, out-of-range rating, negative progress, unknown shelf"""

    error_code = "INVALID_INPUT"
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        self.field = field
        self.value = value
        details = {}
        if field:
            details = {"field": field, "value": value}
        super().__init__(message, details=details)


class ConflictError(BookWormError):
    """Write rejected because it would duplicate a unique record"""

    error_code = "CONFLICT"
    status_code = 409


class UpstreamError(BookWormError):
    """
    The document store is unreachable or rejected an operation.

    Raised by RecordStore for every PyMongoError, and by the aggregate
    maintainer when a counter update fails after the primary write.
    """

    error_code = "UPSTREAM_FAILURE"
    status_code = 503

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(
            message, details={"operation": operation} if operation else None
        )
