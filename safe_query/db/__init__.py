# safe_query/db/__init__.py
"""
Database module.

Connects Motor and Beanie, and hands out audited collections.
"""
from typing import Any, Dict, Optional, Sequence, Type

from safe_query.core.config import settings
from safe_query.core.logging import log
from safe_query.db.collection import QUERY_METHODS, SafeCollection
from safe_query.engine import SafeQuery
from safe_query.metadata import BeanieSchemaSource, CollectionSchema

# Motor client instance
_client = None
_db = None
_connection_error: Optional[str] = None

# Registered Beanie document classes by collection name
_document_models: Dict[str, Any] = {}


def register_document_models(document_models: Sequence[Type[Any]]) -> None:
    """Remember which document class describes each collection."""
    source = BeanieSchemaSource()
    for document_cls in document_models:
        _document_models[source.resolve_name(document_cls)] = document_cls


async def connect_db(
    document_models: Sequence[Type[Any]] = (),
    mongo_url: Optional[str] = None,
    database_name: Optional[str] = None,
):
    """
    Connect to MongoDB and initialize Beanie.

    If MongoDB is not available, stores the error for later retrieval
    rather than raising.
    """
    global _client, _db, _connection_error
    mongo_url = mongo_url or settings.database.mongo_url
    try:
        from motor.motor_asyncio import AsyncIOMotorClient

        _client = AsyncIOMotorClient(
            mongo_url,
            serverSelectionTimeoutMS=settings.database.server_selection_timeout_ms,
        )

        database_name = database_name or settings.database.database_name
        if database_name:
            _db = _client[database_name]
        else:
            try:
                _db = _client.get_default_database()
            except Exception:
                _db = _client.safe_query

        # Fail fast if MongoDB is not running
        await _client.admin.command("ping")
        log("DB", "✅ Connected to MongoDB")

        if document_models:
            from beanie import init_beanie

            await init_beanie(database=_db, document_models=list(document_models))
            register_document_models(document_models)
            log("DB", f"✅ Beanie ODM initialized with {len(document_models)} models")
        _connection_error = None
    except Exception as e:
        error_msg = str(e)
        log("DB", f"⚠️ MongoDB not available: {error_msg}")
        log("DB", f"   ℹ️ Queries cannot be audited until MongoDB is reachable on {mongo_url}")
        _client = None
        _db = None
        _connection_error = error_msg


async def disconnect_db():
    """Disconnect from MongoDB."""
    global _client, _db
    if _client:
        _client.close()
        log("DB", "Disconnected from MongoDB")
    _client = None
    _db = None


def get_db():
    """
    Get database instance.

    Returns None if MongoDB is not connected.
    """
    return _db


def is_connected() -> bool:
    """Check if database is connected."""
    return _db is not None


def get_connection_error() -> Optional[str]:
    """Get connection error message if connection failed."""
    return _connection_error


def get_collection(name: str, engine: Optional[SafeQuery] = None) -> Optional[SafeCollection]:
    """
    Get an audited collection by name.

    Unregistered collections are audited against a bare _id schema.
    Returns None if database is not connected.
    """
    if _db is None:
        if _connection_error:
            log("DB", f"⚠️ Cannot get collection '{name}': {_connection_error}")
        return None
    source = _document_models.get(name) or CollectionSchema(name=name, fields=("_id",))
    return SafeCollection(_db[name], source, engine)


def safe_collection(document_cls: Type[Any], collection: Any = None, engine: Optional[SafeQuery] = None) -> SafeCollection:
    """
    Wrap the Motor collection of a Beanie document.

    init_beanie must have run unless an explicit collection is given.
    Only calls made through the returned wrapper are audited; Beanie
    model-level queries such as Project.find(...) go straight to Motor.
    """
    if collection is None:
        collection = document_cls.get_motor_collection()
    return SafeCollection(collection, document_cls, engine)


__all__ = [
    "QUERY_METHODS",
    "SafeCollection",
    "register_document_models",
    "connect_db",
    "disconnect_db",
    "get_db",
    "is_connected",
    "get_connection_error",
    "get_collection",
    "safe_collection",
]
