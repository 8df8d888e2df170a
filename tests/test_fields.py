# tests/test_fields.py
"""
Tests for root field extraction and schema existence.
"""
import pytest

from safe_query.inspection import get_non_existing_fields, get_root_query_fields


ROOT_FIELD_CASES = [
    ("empty query", {}, []),
    ("_id query", {"_id": "123"}, ["_id"]),
    (
        "plain query",
        {"createdAt": "2020-09-09", "customer": "bee"},
        ["createdAt", "customer"],
    ),
    ("nested document", {"customer": {"alias": "bee"}}, ["customer"]),
    ("dotted path", {"customer.alias": "bee"}, ["customer"]),
    (
        "two dotted paths on one root",
        {"customer.alias": "bee", "customer.id": "1009"},
        ["customer"],
    ),
    (
        "$and query",
        {"$and": [{"createdAt": "2020-09-09"}, {"customer": "bee"}]},
        ["createdAt", "customer"],
    ),
    (
        "$or query",
        {"$or": [{"createdAt": "2020-09-09"}, {"createdAt": {"$gt": "2021-01-01"}}]},
        ["createdAt"],
    ),
    ("$nor query", {"$nor": [{"price": 1.99}, {"sale": True}]}, ["price", "sale"]),
    (
        "complex query",
        {
            "$or": [
                {"$and": [{"customer.alias": "bee"}, {"createdAt": "2020-09-09"}]},
                {"$nor": [{"location": "U.S."}, {"status": "in progress"}]},
                {"batch": "abc"},
            ]
        },
        ["customer", "createdAt", "location", "status", "batch"],
    ),
    (
        # What the filter looks like when an ObjectId is passed as the whole filter
        "query with _bsontype",
        {
            "_bsontype": "ObjectID",
            "id": {"data": [95, 59, 16, 39, 138, 200, 59, 0, 30, 49, 68, 252]},
        },
        ["id"],
    ),
    ("$text is not expanded", {"$text": {"$search": "bee"}, "status": "open"}, ["status"]),
    ("$where is ignored", {"$where": "this.a > 1"}, []),
    ("$comment is ignored", {"$comment": "audit", "batch": "abc"}, ["batch"]),
    (
        "unsupported selector holding a list",
        {"$in": [{"hidden": 1}], "visible": 1},
        ["visible"],
    ),
    ("$or with a non-list value", {"$or": {"createdAt": 1}}, []),
]


@pytest.mark.parametrize(
    "query,fields",
    [(query, fields) for _, query, fields in ROOT_FIELD_CASES],
    ids=[name for name, _, _ in ROOT_FIELD_CASES],
)
def test_get_root_query_fields(query, fields):
    assert sorted(get_root_query_fields(query)) == sorted(fields)


def test_root_fields_are_deduplicated_across_selectors():
    query = {
        "status": "open",
        "$or": [{"status": "closed"}, {"status.code": 3}],
        "$and": [{"$nor": [{"status": "draft"}]}],
    }
    assert get_root_query_fields(query) == ["status"]


def test_root_fields_keep_first_appearance_order():
    query = {"b": 1, "$and": [{"a": 1}, {"c": 1}], "a.x": 2}
    assert get_root_query_fields(query) == ["b", "a", "c"]


@pytest.mark.parametrize(
    "query_fields,model_fields,non_existing",
    [
        (["_id", "createdAt"], {"_id", "createdAt", "customer"}, []),
        (["_id", "createdAt"], {"_id"}, ["createdAt"]),
        (["b", "a", "c"], set(), ["b", "a", "c"]),
    ],
)
def test_get_non_existing_fields(query_fields, model_fields, non_existing):
    assert get_non_existing_fields(query_fields, model_fields) == non_existing
