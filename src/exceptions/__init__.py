"""
Custom exceptions for the BookWorm service
"""

from .bookworm_exceptions import (
    BookWormError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UpstreamError,
)

__all__ = [
    "BookWormError",
    "ConflictError",
    "InvalidInputError",
    "NotFoundError",
    "UpstreamError",
]
