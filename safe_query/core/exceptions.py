# safe_query/core/exceptions.py
"""
Custom exceptions for the library.
"""
from typing import Optional, Dict, Any, Sequence


class SafeQueryError(Exception):
    """Base exception for all safe-query errors."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class QueryViolation(SafeQueryError):
    """A query was aborted by one of the checks."""
    def __init__(self, message: str, collection_name: str = "", violating_fields: Sequence[str] = ()):
        super().__init__(
            message,
            {"collection": collection_name, "fields": list(violating_fields)}
        )
        self.collection_name = collection_name
        self.violating_fields = list(violating_fields)


class InvalidField(QueryViolation):
    """Query references fields missing from the collection schema."""
    pass


class LowIndexCoverage(QueryViolation):
    """No declared index covers enough of the query fields."""
    pass
