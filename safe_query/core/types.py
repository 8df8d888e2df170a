# safe_query/core/types.py
"""
Shared types: collection metadata, violation records and check handlers.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .config import settings
from .logging import log_violation


class CollectionMetadata(BaseModel):
    """Declared fields and index field lists of one collection."""
    model_config = ConfigDict(frozen=True)

    name: str
    fields: FrozenSet[str] = Field(default_factory=frozenset)
    # Field lists in declared order, the implicit _id index last
    indexes: Tuple[Tuple[str, ...], ...] = ()


class ViolatingQuery(BaseModel):
    """Payload handed to warn actions and throw message builders."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    collection_name: str
    violating_fields: List[str]
    comment: Optional[str] = None
    full_query: Dict[str, Any] = Field(default_factory=dict)


WarnAction = Callable[[ViolatingQuery], None]
ThrowMessage = Callable[[ViolatingQuery], str]
Condition = Callable[[], bool]


@dataclass(frozen=True)
class FieldCheckHandler:
    # Run when warning is enabled
    warn_action: Optional[WarnAction] = None
    # Message of the raised error when throwing is enabled
    throw_message: Optional[ThrowMessage] = None


@dataclass(frozen=True)
class IndexCheckHandler:
    warn_action: Optional[WarnAction] = None
    throw_message: Optional[ThrowMessage] = None
    # Minimum fraction of query fields covered by an index prefix
    min_coverage: Optional[float] = 0.5


def default_field_warning_handler(query: ViolatingQuery) -> None:
    log_violation("Invalid query fields", query.collection_name, query.violating_fields, query.comment)


def default_index_warning_handler(query: ViolatingQuery) -> None:
    log_violation("Insufficient index coverage", query.collection_name, query.violating_fields, query.comment)


def _always(value: bool) -> Condition:
    return lambda: value


def as_condition(condition: Any) -> Condition:
    """Wrap a constant boolean into a zero-argument predicate."""
    if isinstance(condition, bool):
        return _always(condition)
    if not callable(condition):
        raise TypeError(f"Condition must be a bool or a callable, got {type(condition).__name__}")
    return condition


@dataclass(frozen=True)
class SafeQueryOptions:
    """
    Complete engine configuration.

    A check whose handler is None is skipped entirely.
    """
    should_warn: Condition = field(default_factory=lambda: _always(True))
    should_throw: Condition = field(default_factory=lambda: _always(False))
    check_field: Optional[FieldCheckHandler] = field(
        default_factory=lambda: FieldCheckHandler(warn_action=default_field_warning_handler)
    )
    check_index: Optional[IndexCheckHandler] = field(
        default_factory=lambda: IndexCheckHandler(warn_action=default_index_warning_handler)
    )

    @classmethod
    def from_settings(cls) -> "SafeQueryOptions":
        """Build options from environment-driven settings."""
        policy = settings.policy
        return cls(
            should_warn=_always(policy.warn_enabled),
            should_throw=_always(policy.throw_enabled),
            check_field=FieldCheckHandler(warn_action=default_field_warning_handler),
            check_index=IndexCheckHandler(
                warn_action=default_index_warning_handler,
                min_coverage=policy.min_coverage,
            ),
        )


DEFAULT_OPTIONS = SafeQueryOptions()
