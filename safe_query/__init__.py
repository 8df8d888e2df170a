"""
safe-query - audits MongoDB queries against declared schemas and indexes.

    from safe_query import SafeQuery, SafeCollection, CollectionSchema

    engine = SafeQuery().set_throw_condition(True).set_field_check_handler(
        throw_message=lambda q: f"Unknown fields in {q.collection_name}: {q.violating_fields}"
    )
    projects = SafeCollection(db["projects"], Project, engine)
"""
from safe_query.core import (
    DEFAULT_OPTIONS,
    CollectionMetadata,
    FieldCheckHandler,
    IndexCheckHandler,
    InvalidField,
    LowIndexCoverage,
    QueryViolation,
    SafeQueryError,
    SafeQueryOptions,
    ViolatingQuery,
    settings,
)
from safe_query.db import QUERY_METHODS, SafeCollection, safe_collection
from safe_query.engine import SafeQuery, get_safe_query, hash_query_fields, reset_safe_query
from safe_query.metadata import (
    BeanieSchemaSource,
    CollectionSchema,
    DeclaredSchemaSource,
    MetadataCache,
    SchemaSource,
)

__version__ = "1.0.0"

__all__ = [
    "DEFAULT_OPTIONS",
    "CollectionMetadata",
    "FieldCheckHandler",
    "IndexCheckHandler",
    "InvalidField",
    "LowIndexCoverage",
    "QueryViolation",
    "SafeQueryError",
    "SafeQueryOptions",
    "ViolatingQuery",
    "settings",
    "QUERY_METHODS",
    "SafeCollection",
    "safe_collection",
    "SafeQuery",
    "get_safe_query",
    "hash_query_fields",
    "reset_safe_query",
    "BeanieSchemaSource",
    "CollectionSchema",
    "DeclaredSchemaSource",
    "MetadataCache",
    "SchemaSource",
]
