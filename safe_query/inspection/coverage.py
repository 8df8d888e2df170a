# safe_query/inspection/coverage.py
"""
Index coverage of a query.

A compound index (a, b, c) serves a query only through its leading prefix:
{a, b} gets credit for two fields, {b, c} gets none because "a" is missing.
"""
from typing import Sequence

from .fields import root_field


def covered_prefix_length(query_fields: Sequence[str], index: Sequence[str]) -> int:
    """Count leading index fields whose root name the query constrains."""
    query_field_set = set(query_fields)
    covered_field_count = 0
    for index_field in index:
        if root_field(index_field) not in query_field_set:
            break
        covered_field_count += 1
    return covered_field_count


def is_covered_by_index(
    query_fields: Sequence[str],
    indexes: Sequence[Sequence[str]],
    min_coverage: float,
) -> bool:
    """
    Return True if any index prefix covers at least min_coverage of the query fields.

    Indexes are tried in order and the first one that qualifies wins.
    An empty query is trivially covered.
    """
    total_field_count = len(query_fields)
    if total_field_count == 0:
        return True

    for index in indexes:
        covered_field_count = covered_prefix_length(query_fields, index)
        if covered_field_count / total_field_count >= min_coverage:
            return True
    return False
