"""
Core module - configuration, logging, errors and shared types.
"""
from .config import settings
from .exceptions import (
    SafeQueryError,
    QueryViolation,
    InvalidField,
    LowIndexCoverage,
)
from .types import (
    CollectionMetadata,
    ViolatingQuery,
    FieldCheckHandler,
    IndexCheckHandler,
    SafeQueryOptions,
    DEFAULT_OPTIONS,
)

__all__ = [
    # Config
    "settings",
    # Exceptions
    "SafeQueryError",
    "QueryViolation",
    "InvalidField",
    "LowIndexCoverage",
    # Types
    "CollectionMetadata",
    "ViolatingQuery",
    "FieldCheckHandler",
    "IndexCheckHandler",
    "SafeQueryOptions",
    "DEFAULT_OPTIONS",
]
