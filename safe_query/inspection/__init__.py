"""
Inspection module - pure functions over filter documents and index lists.
"""
from .fields import (
    SUPPORTED_QUERY_SELECTORS,
    FIELDS_TO_IGNORE,
    root_field,
    get_root_query_fields,
    get_non_existing_fields,
)
from .coverage import covered_prefix_length, is_covered_by_index

__all__ = [
    "SUPPORTED_QUERY_SELECTORS",
    "FIELDS_TO_IGNORE",
    "root_field",
    "get_root_query_fields",
    "get_non_existing_fields",
    "covered_prefix_length",
    "is_covered_by_index",
]
