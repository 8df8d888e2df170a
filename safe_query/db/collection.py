# safe_query/db/collection.py
"""
Audited collection wrapper.

SafeCollection sits in front of a Motor or PyMongo collection and runs the
SafeQuery engine before every filter-based query. A rejected query never
reaches the driver; an accepted one is forwarded exactly once, unchanged.
Queries that bypass the wrapper, including Beanie model methods like
Document.find(), are not audited.
"""
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional, Tuple

from safe_query.engine import SafeQuery, get_safe_query

# Driver methods whose first argument is a filter document.
# count/remove/update and findOneAndRemove are covered by their PyMongo 4 forms.
QUERY_METHODS = (
    "count_documents",
    "delete_many",
    "delete_one",
    "find",
    "find_one",
    "find_one_and_delete",
    "find_one_and_replace",
    "find_one_and_update",
    "replace_one",
    "update_many",
    "update_one",
)


def _split_filter(args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Optional[Any]:
    if args:
        return args[0]
    return kwargs.get("filter")


class SafeCollection:
    """
    Motor/PyMongo collection proxy that audits queries.

    Args:
        collection: the driver collection to forward to
        source: collection identity for metadata (Beanie document class or CollectionSchema)
        engine: SafeQuery instance, the process-wide one by default
    """

    def __init__(self, collection: Any, source: Any, engine: Optional[SafeQuery] = None):
        self._collection = collection
        self._source = source
        self._engine = engine or get_safe_query()

    @property
    def delegate(self) -> Any:
        return self._collection

    @property
    def source(self) -> Any:
        return self._source

    @property
    def engine(self) -> SafeQuery:
        return self._engine

    def _audited(self, method_name: str) -> Callable[..., Any]:
        method = getattr(self._collection, method_name)

        def audited_call(*args: Any, **kwargs: Any) -> Any:
            query_conditions = _split_filter(args, kwargs)
            if isinstance(query_conditions, Mapping):
                query_options = {"comment": kwargs.get("comment")}
                self._engine.inspect(self._source, query_conditions, query_options)
            return method(*args, **kwargs)

        return audited_call

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        if name in QUERY_METHODS:
            return self._audited(name)
        return getattr(self._collection, name)

    def __repr__(self) -> str:
        return f"SafeCollection({self._collection!r})"
