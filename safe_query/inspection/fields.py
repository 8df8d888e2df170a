# safe_query/inspection/fields.py
"""
Field extraction from MongoDB filter documents.

Only root field names are reported: {"customer.alias": "bee"} and
{"customer": {"alias": "bee"}} both touch "customer".
"""
from typing import Any, Iterable, List, Mapping, Set

# Logical selectors whose list of sub-filters is walked recursively.
# Other root selectors ($text, $where, $comment, $expr) contribute no fields.
SUPPORTED_QUERY_SELECTORS = frozenset({"$and", "$nor", "$or"})

# Keys injected by the driver when an ObjectId is passed as the whole filter
FIELDS_TO_IGNORE = frozenset({"_bsontype"})

OPERATOR_PREFIX = "$"
PATH_SEPARATOR = "."


def root_field(path: str) -> str:
    """Return the first segment of a dotted field path."""
    return path.split(PATH_SEPARATOR)[0]


def _collect_root_fields(conditions: Mapping[str, Any], found: dict) -> None:
    for field_or_operator, expression in conditions.items():
        if field_or_operator in FIELDS_TO_IGNORE:
            continue

        if field_or_operator in SUPPORTED_QUERY_SELECTORS and isinstance(expression, (list, tuple)):
            for sub_conditions in expression:
                if isinstance(sub_conditions, Mapping):
                    _collect_root_fields(sub_conditions, found)
        elif not field_or_operator.startswith(OPERATOR_PREFIX):
            found.setdefault(root_field(field_or_operator), None)


def get_root_query_fields(conditions: Mapping[str, Any]) -> List[str]:
    """
    Return the distinct root fields a filter constrains.

    Fields keep the order in which they first appear.
    """
    # dict keeps insertion order, a set would not
    found: dict = {}
    _collect_root_fields(conditions, found)
    return list(found)


def get_non_existing_fields(query_fields: Iterable[str], model_fields: Set[str]) -> List[str]:
    """
    Return query fields that do not exist in model fields.
    """
    return [f for f in query_fields if f not in model_fields]
