# tests/conftest.py
"""
Shared pytest fixtures for safe-query tests.

Provides:
- The declared "project" collection schema
- A fresh SafeQuery engine per test
- Warning/throw recorders
- Mock driver collections
"""
from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest

from safe_query import CollectionSchema, DeclaredSchemaSource, SafeQuery
from tests.utils.call_counter import CallCounter


# ═══════════════════════════════════════════════════════
# FIXTURES - Schemas
# ═══════════════════════════════════════════════════════

@pytest.fixture
def project_schema():
    """Project collection with single-field indexes on createdAt and name."""
    return CollectionSchema(
        name="project",
        fields=("_id", "name", "createdAt", "updatedAt", "priority", "active", "config"),
        indexes=(("createdAt",), ("name",)),
    )


@pytest.fixture
def valid_query():
    return {"name": "test_project"}


@pytest.fixture
def invalid_query():
    return {"invalidField": True}


@pytest.fixture
def partially_indexed_query():
    """Covered by the name index at 50%."""
    return {"name": "test_project", "uncoveredField": True}


# ═══════════════════════════════════════════════════════
# FIXTURES - Engine
# ═══════════════════════════════════════════════════════

@pytest.fixture
def counter():
    return CallCounter()


@pytest.fixture
def engine():
    """Engine that reads CollectionSchema declarations."""
    return SafeQuery(schema_source=DeclaredSchemaSource())


@pytest.fixture
def recorded() -> List:
    """Collected violation records passed to warn actions."""
    return []


@pytest.fixture
def warning_engine(engine, recorded):
    """Warn-only engine recording both checks into the recorded list."""
    return (
        engine
        .set_warn_condition(True)
        .set_throw_condition(False)
        .set_field_check_handler(warn_action=lambda q: recorded.append(("field", q)))
        .set_index_check_handler(warn_action=lambda q: recorded.append(("index", q)))
    )


# ═══════════════════════════════════════════════════════
# FIXTURES - Mock driver collections
# ═══════════════════════════════════════════════════════

@pytest.fixture
def mock_collection():
    """PyMongo-like collection: every method is a synchronous mock."""
    return MagicMock(name="collection")


@pytest.fixture
def mock_motor_collection():
    """Motor-like collection: find returns a cursor, the rest are coroutines."""
    collection = MagicMock(name="motor_collection")
    for method in (
        "count_documents",
        "delete_many",
        "delete_one",
        "find_one",
        "find_one_and_delete",
        "find_one_and_replace",
        "find_one_and_update",
        "replace_one",
        "update_many",
        "update_one",
    ):
        setattr(collection, method, AsyncMock(name=method))
    return collection
