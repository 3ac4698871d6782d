"""
users/filters.py -- Translate a sparse map of request criteria into one SQL predicate.

The predicate is folded: start from true() and AND in one clause per
recognized key that is present. Any subset of the keys works without a
hand-written query per combination, and adding a filterable field is one
entry in _CLAUSES.

Recognized keys (JSON names, as they arrive on the query string):
  fullName -- case-insensitive substring
  email    -- case-insensitive substring
  gender   -- exact match
  roleId   -- exact match, integer

Unrecognized keys are ignored. Values arrive as strings from the query string
but plain Python values are accepted too, so the service can be called
directly.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy import and_, func, true
from sqlalchemy.sql.elements import ColumnElement

from users.exceptions import InvalidArgumentError
from users.store import user_table


def _contains_ignore_case(column) -> Callable[[Any], ColumnElement[bool]]:
    def clause(value: Any) -> ColumnElement[bool]:
        # autoescape: a literal % or _ in the search text matches itself
        return func.lower(column).contains(str(value).lower(), autoescape=True)

    return clause


def _equals(column) -> Callable[[Any], ColumnElement[bool]]:
    def clause(value: Any) -> ColumnElement[bool]:
        return column == value

    return clause


def _equals_int(column, key: str) -> Callable[[Any], ColumnElement[bool]]:
    def clause(value: Any) -> ColumnElement[bool]:
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(f"Filter {key} must be an integer, got {value!r}") from exc
        return column == number

    return clause


_CLAUSES: dict[str, Callable[[Any], ColumnElement[bool]]] = {
    "fullName": _contains_ignore_case(user_table.c.full_name),
    "email": _contains_ignore_case(user_table.c.email),
    "gender": _equals(user_table.c.gender),
    "roleId": _equals_int(user_table.c.role_id, "roleId"),
}

FILTER_KEYS: frozenset[str] = frozenset(_CLAUSES)


def build_user_predicate(filters: Mapping[str, Any]) -> ColumnElement[bool]:
    """Return the AND of one clause per recognized key present in filters.

    An empty or fully unrecognized mapping yields true(), which matches every
    row. Raises InvalidArgumentError if roleId is not an integer.
    """
    predicate: ColumnElement[bool] = true()
    for key, make_clause in _CLAUSES.items():
        if key in filters:
            predicate = and_(predicate, make_clause(filters[key]))
    return predicate
