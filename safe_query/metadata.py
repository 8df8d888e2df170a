# safe_query/metadata.py
"""
Collection metadata: schema sources and the per-engine metadata cache.

A schema source turns a collection identity (a Beanie document class or a
declared CollectionSchema) into field names and index field lists. The cache
resolves each collection once and keeps the result for the lifetime of the
engine that owns it.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Set

from pymongo import IndexModel

from safe_query.core.logging import log
from safe_query.core.types import CollectionMetadata

PRIMARY_KEY = "_id"


class SchemaSource(Protocol):
    """Resolves schema information for a collection identity."""

    def resolve_name(self, collection: Any) -> str:
        ...

    def resolve_fields(self, collection: Any) -> Set[str]:
        ...

    def resolve_indexes(self, collection: Any) -> List[List[str]]:
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# DECLARED SCHEMAS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class CollectionSchema:
    """Plain declaration of a collection's fields and indexes."""
    name: str
    fields: Sequence[str] = field(default_factory=tuple)
    indexes: Sequence[Sequence[str]] = field(default_factory=tuple)


class DeclaredSchemaSource:
    """Schema source for CollectionSchema declarations."""

    def resolve_name(self, collection: CollectionSchema) -> str:
        return collection.name

    def resolve_fields(self, collection: CollectionSchema) -> Set[str]:
        return set(collection.fields)

    def resolve_indexes(self, collection: CollectionSchema) -> List[List[str]]:
        return [list(index) for index in collection.indexes]


# ═══════════════════════════════════════════════════════════════════════════════
# BEANIE DOCUMENTS
# ═══════════════════════════════════════════════════════════════════════════════

def _is_indexed(field_info: Any) -> bool:
    # Indexed(str) is either a subclass carrying _indexed or an Annotated
    # marker stored in the pydantic field metadata
    if hasattr(field_info.annotation, "_indexed"):
        return True
    return any(hasattr(meta, "_indexed") for meta in field_info.metadata)


def _index_keys(entry: Any) -> List[str]:
    """Field names of one Settings.indexes entry, in declared order."""
    if isinstance(entry, str):
        return [entry]
    if isinstance(entry, IndexModel):
        return list(entry.document["key"].keys())
    if isinstance(entry, (list, tuple)):
        return [item if isinstance(item, str) else item[0] for item in entry]
    raise TypeError(f"Unsupported index declaration: {entry!r}")


class BeanieSchemaSource:
    """
    Schema source for Beanie Document subclasses.

    Reads the class definition only, so init_beanie does not have to run first.
    """

    def resolve_name(self, document_cls: Any) -> str:
        document_settings = getattr(document_cls, "Settings", None)
        return getattr(document_settings, "name", None) or document_cls.__name__

    def resolve_fields(self, document_cls: Any) -> Set[str]:
        fields = {
            field_info.alias or name
            for name, field_info in document_cls.model_fields.items()
        }
        fields.discard("id")
        fields.add(PRIMARY_KEY)
        return fields

    def resolve_indexes(self, document_cls: Any) -> List[List[str]]:
        indexes = [
            [field_info.alias or name]
            for name, field_info in document_cls.model_fields.items()
            if _is_indexed(field_info)
        ]
        document_settings = getattr(document_cls, "Settings", None)
        for entry in getattr(document_settings, "indexes", None) or []:
            keys = _index_keys(entry)
            if keys:
                indexes.append(keys)
        return indexes


class DefaultSchemaSource:
    """Dispatches declared schemas and Beanie documents to their source."""

    def __init__(self):
        self.declared = DeclaredSchemaSource()
        self.beanie = BeanieSchemaSource()

    def _source_for(self, collection: Any) -> SchemaSource:
        if isinstance(collection, CollectionSchema):
            return self.declared
        return self.beanie

    def resolve_name(self, collection: Any) -> str:
        return self._source_for(collection).resolve_name(collection)

    def resolve_fields(self, collection: Any) -> Set[str]:
        return self._source_for(collection).resolve_fields(collection)

    def resolve_indexes(self, collection: Any) -> List[List[str]]:
        return self._source_for(collection).resolve_indexes(collection)


# ═══════════════════════════════════════════════════════════════════════════════
# CACHE
# ═══════════════════════════════════════════════════════════════════════════════

class MetadataCache:
    """
    Write-once cache of CollectionMetadata keyed by collection name.

    Entries are never refreshed: schemas are assumed fixed for the process.
    Concurrent first lookups may resolve twice; setdefault keeps one entry.
    """

    def __init__(self, schema_source: Optional[SchemaSource] = None):
        self.schema_source = schema_source or DefaultSchemaSource()
        self._entries: Dict[str, CollectionMetadata] = {}

    def __contains__(self, collection_name: str) -> bool:
        return collection_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_metadata(self, collection: Any) -> CollectionMetadata:
        name = self.schema_source.resolve_name(collection)
        existing = self._entries.get(name)
        if existing is not None:
            return existing

        fields = self.schema_source.resolve_fields(collection)
        indexes = [tuple(index) for index in self.schema_source.resolve_indexes(collection)]
        indexes.append((PRIMARY_KEY,))
        metadata = CollectionMetadata(
            name=name,
            fields=frozenset(fields),
            indexes=tuple(indexes),
        )
        log("METADATA", f"Resolved {len(fields)} fields, {len(indexes)} indexes", collection=name)
        return self._entries.setdefault(name, metadata)
