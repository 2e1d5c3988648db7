"""Document Filters — pure evaluation of the Mongo-style filter and update language.

Invariants:
    - Pure functions: no IO, no mutation of the input document
    - Field equality against a stored list means "list contains value"
    - $addToSet never produces duplicates; $pull removes every occurrence
    - Unknown operators raise ValueError (callers never pass user input here)

Design Decisions:
    - Tiny operator subset ($in, $set, $addToSet, $pull): the operators the cascades need
    - Evaluation in Python over SQL JSON operators: identical semantics on SQLite
      and PostgreSQL
"""

import copy
from typing import Any

ID_FIELD = "_id"

_FILTER_OPERATORS = {"$in"}
_UPDATE_OPERATORS = {"$set", "$addToSet", "$pull"}


def _value_matches(stored: Any, expected: Any) -> bool:
    """Scalar equality, or membership when the stored value is a list."""
    if isinstance(stored, list) and not isinstance(expected, list):
        return expected in stored
    return stored == expected


def _condition_matches(stored: Any, condition: Any) -> bool:
    if isinstance(condition, dict):
        unknown = set(condition) - _FILTER_OPERATORS
        if unknown:
            raise ValueError(f"Unsupported filter operator(s): {sorted(unknown)}")
        candidates = condition["$in"]
        return any(_value_matches(stored, c) for c in candidates)
    return _value_matches(stored, condition)


def matches(document: dict, filter_: dict | None) -> bool:
    """Return True if document satisfies every field condition in filter_."""
    if not filter_:
        return True
    return all(
        _condition_matches(document.get(key), condition)
        for key, condition in filter_.items()
    )


def id_candidates(filter_: dict | None) -> list | None:
    """Ids the filter restricts _id to, or None if unrestricted.

    Lets the store push the _id part of a filter down to the primary key.
    """
    if not filter_ or ID_FIELD not in filter_:
        return None
    condition = filter_[ID_FIELD]
    if isinstance(condition, dict):
        return list(condition.get("$in", []))
    return [condition]


def apply_update(document: dict, update: dict) -> dict:
    """Apply $set/$addToSet/$pull to a copy of document and return it."""
    unknown = set(update) - _UPDATE_OPERATORS
    if unknown:
        raise ValueError(f"Unsupported update operator(s): {sorted(unknown)}")

    result = copy.deepcopy(document)
    for key, value in update.get("$set", {}).items():
        if key == ID_FIELD:
            raise ValueError("_id is immutable")
        result[key] = value

    for key, value in update.get("$addToSet", {}).items():
        items = list(result.get(key) or [])
        if value not in items:
            items.append(value)
        result[key] = items

    for key, value in update.get("$pull", {}).items():
        result[key] = [v for v in (result.get(key) or []) if v != value]

    return result
