# safe_query/engine.py
"""
SafeQuery policy engine.

Runs the field check and the index check for every inspected query and
decides between ignoring, warning and raising:

- throwing wins over warning when a throw message builder is configured
- throwing without a message builder falls through to warning
- warnings are throttled per distinct field combination until cleared
"""
import base64
import hashlib
from dataclasses import replace
from threading import RLock
from typing import Any, Iterable, List, Mapping, Optional, Set, Union

from safe_query.core.exceptions import InvalidField, LowIndexCoverage, QueryViolation
from safe_query.core.logging import log
from safe_query.core.types import (
    DEFAULT_OPTIONS,
    CollectionMetadata,
    Condition,
    FieldCheckHandler,
    IndexCheckHandler,
    SafeQueryOptions,
    ViolatingQuery,
    as_condition,
)
from safe_query.inspection import (
    get_non_existing_fields,
    get_root_query_fields,
    is_covered_by_index,
)
from safe_query.metadata import MetadataCache, SchemaSource

# Length of the digest suffix stored in the throttle sets
DIGEST_LENGTH = 5


def hash_query_fields(query_fields: Iterable[str]) -> str:
    """
    Short digest of a field combination, independent of field order.

    Collisions between unrelated combinations are possible and accepted.
    """
    sorted_fields = sorted(query_fields)
    digest = hashlib.sha1("".join(sorted_fields).encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")[-DIGEST_LENGTH:]


class SafeQuery:
    """
    Query auditing engine shared by every collection it is wired into.

    Options are an immutable snapshot swapped under the lock; each inspection
    reads the snapshot once.
    """

    def __init__(
        self,
        options: Optional[SafeQueryOptions] = None,
        schema_source: Optional[SchemaSource] = None,
        cache: Optional[MetadataCache] = None,
    ):
        self._lock = RLock()
        self._options = options if options is not None else DEFAULT_OPTIONS
        self._cache = cache if cache is not None else MetadataCache(schema_source)
        self._warned_field_queries: Set[str] = set()
        self._warned_index_queries: Set[str] = set()

    # ─────────────────────────────────────────────────────────
    # Configuration
    # ─────────────────────────────────────────────────────────

    @property
    def options(self) -> SafeQueryOptions:
        return self._options

    @property
    def cache(self) -> MetadataCache:
        return self._cache

    def _update_options(self, **changes: Any) -> "SafeQuery":
        with self._lock:
            self._options = replace(self._options, **changes)
        return self

    def should_warn(self) -> bool:
        return self._options.should_warn()

    def set_warn_condition(self, warn_condition: Union[bool, Condition]) -> "SafeQuery":
        return self._update_options(should_warn=as_condition(warn_condition))

    def should_throw(self) -> bool:
        return self._options.should_throw()

    def set_throw_condition(self, throw_condition: Union[bool, Condition]) -> "SafeQuery":
        return self._update_options(should_throw=as_condition(throw_condition))

    def set_field_check_handler(self, **changes: Any) -> "SafeQuery":
        """
        Merge handler fields into the field check handler.

        Fields not named are kept. Passing warn_action=None disables warning.
        """
        with self._lock:
            current = self._options.check_field or FieldCheckHandler()
            self._options = replace(self._options, check_field=replace(current, **changes))
        return self

    def set_index_check_handler(self, **changes: Any) -> "SafeQuery":
        """
        Merge handler fields into the index check handler.

        Fields not named are kept, e.g. set_index_check_handler(min_coverage=0.8).
        """
        with self._lock:
            current = self._options.check_index or IndexCheckHandler()
            self._options = replace(self._options, check_index=replace(current, **changes))
        return self

    def clear_warned_field_queries(self) -> "SafeQuery":
        with self._lock:
            self._warned_field_queries.clear()
        log("THROTTLE", "Cleared warned field queries")
        return self

    def clear_warned_index_queries(self) -> "SafeQuery":
        with self._lock:
            self._warned_index_queries.clear()
        log("THROTTLE", "Cleared warned index queries")
        return self

    # ─────────────────────────────────────────────────────────
    # Inspection
    # ─────────────────────────────────────────────────────────

    def get_metadata(self, collection: Any) -> CollectionMetadata:
        return self._cache.get_metadata(collection)

    def inspect(
        self,
        collection: Any,
        query_conditions: Optional[Mapping[str, Any]],
        query_options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Audit one query against a collection.

        Returns normally if the query may proceed. Both checks run even when the
        first one fails, so the index warning still fires for a rejected query.

        Raises:
            InvalidField: the query uses undeclared fields and throwing is on
            LowIndexCoverage: no index covers the query and throwing is on
        """
        options = self._options
        if options.check_field is None and options.check_index is None:
            return
        if not query_conditions:
            return
        query_fields = get_root_query_fields(query_conditions)
        if not query_fields:
            return

        metadata = self.get_metadata(collection)
        failure: Optional[QueryViolation] = None
        if options.check_field is not None:
            try:
                self.check_field(metadata, query_conditions, query_fields, query_options, options)
            except InvalidField as exc:
                failure = exc
        if options.check_index is not None:
            try:
                self.check_index(metadata, query_conditions, query_fields, query_options, options)
            except LowIndexCoverage as exc:
                failure = failure or exc
        if failure is not None:
            raise failure

    def _is_new_warning(self, warned_queries: Set[str], query_fields: List[str]) -> bool:
        """Record the digest and report whether it was unseen."""
        digest = hash_query_fields(query_fields)
        with self._lock:
            if digest in warned_queries:
                log("THROTTLE", f"Suppressed repeated warning {digest}")
                return False
            warned_queries.add(digest)
        return True

    @staticmethod
    def _build_violation(
        metadata: CollectionMetadata,
        query_conditions: Mapping[str, Any],
        violating_fields: List[str],
        query_options: Optional[Mapping[str, Any]],
    ) -> ViolatingQuery:
        return ViolatingQuery(
            collection_name=metadata.name,
            violating_fields=violating_fields,
            comment=(query_options or {}).get("comment"),
            full_query=dict(query_conditions),
        )

    def check_field(
        self,
        metadata: CollectionMetadata,
        query_conditions: Mapping[str, Any],
        query_fields: List[str],
        query_options: Optional[Mapping[str, Any]] = None,
        options: Optional[SafeQueryOptions] = None,
    ) -> None:
        options = options or self._options
        handler = options.check_field or FieldCheckHandler()
        violating_fields = get_non_existing_fields(query_fields, metadata.fields)
        if not violating_fields:
            return

        violating_query = self._build_violation(metadata, query_conditions, violating_fields, query_options)
        if options.should_throw() and handler.throw_message is not None:
            message = handler.throw_message(violating_query)
            log("POLICY", f"Rejecting query with invalid fields {violating_fields}", collection=metadata.name)
            raise InvalidField(message, metadata.name, violating_fields)
        if options.should_warn() and handler.warn_action is not None:
            if self._is_new_warning(self._warned_field_queries, query_fields):
                handler.warn_action(violating_query)

    def check_index(
        self,
        metadata: CollectionMetadata,
        query_conditions: Mapping[str, Any],
        query_fields: List[str],
        query_options: Optional[Mapping[str, Any]] = None,
        options: Optional[SafeQueryOptions] = None,
    ) -> None:
        options = options or self._options
        handler = options.check_index or IndexCheckHandler()
        if not metadata.indexes or not query_fields:
            return
        min_coverage = max(handler.min_coverage or 0, 0)
        if is_covered_by_index(query_fields, metadata.indexes, min_coverage):
            return

        violating_query = self._build_violation(metadata, query_conditions, list(query_fields), query_options)
        if options.should_throw() and handler.throw_message is not None:
            message = handler.throw_message(violating_query)
            log("POLICY", f"Rejecting query below {min_coverage:.0%} index coverage", collection=metadata.name)
            raise LowIndexCoverage(message, metadata.name, query_fields)
        if options.should_warn() and handler.warn_action is not None:
            if self._is_new_warning(self._warned_index_queries, query_fields):
                handler.warn_action(violating_query)


# ═══════════════════════════════════════════════════════════════════════════════
# GLOBAL INSTANCE
# ═══════════════════════════════════════════════════════════════════════════════

_safe_query: Optional[SafeQuery] = None
_safe_query_lock = RLock()


def get_safe_query() -> SafeQuery:
    """Process-wide engine configured from settings."""
    global _safe_query
    with _safe_query_lock:
        if _safe_query is None:
            _safe_query = SafeQuery(SafeQueryOptions.from_settings())
        return _safe_query


def reset_safe_query() -> SafeQuery:
    """Replace the process-wide engine, dropping its cache and throttle state."""
    global _safe_query
    with _safe_query_lock:
        _safe_query = SafeQuery(SafeQueryOptions.from_settings())
        return _safe_query
