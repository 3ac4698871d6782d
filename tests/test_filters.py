"""Unit tests for users/filters.py -- the folded filter predicate.

The predicate is exercised against a real in-memory store rather than by
inspecting the SQL text: what matters is which rows come back.
"""

import pytest

from users.exceptions import InvalidArgumentError
from users.filters import FILTER_KEYS, build_user_predicate
from users.models import User
from users.store import UserStore


@pytest.fixture
def seeded(store: UserStore) -> UserStore:
    rows = [
        User(full_name="Asha Rao", email="asha.rao@clinic.org", gender="Female", role_id=2),
        User(full_name="Ravi Shankar", email="ravi@clinic.org", gender="Male", role_id=1),
        User(full_name="Meera Rao", email="MEERA@hospital.in", gender="Female", role_id=1),
        User(full_name="John 100% Doe", email="john@hospital.in", gender="Male", role_id=2),
        User(full_name="Priya Nair", email="priya_nair@clinic.org", gender="female", role_id=2),
    ]
    for row in rows:
        store.create_user(row)
    return store


def _names(store: UserStore, filters: dict) -> list[str]:
    return [u.full_name for u in store.query(build_user_predicate(filters))]


def test_recognized_keys() -> None:
    assert FILTER_KEYS == {"fullName", "email", "gender", "roleId"}


def test_no_filters_matches_everything(seeded: UserStore) -> None:
    assert _names(seeded, {}) == [u.full_name for u in seeded.list_users()]


def test_unrecognized_keys_are_ignored(seeded: UserStore) -> None:
    assert _names(seeded, {"address": "Pune", "page": "3"}) == _names(seeded, {})


def test_full_name_is_case_insensitive_substring(seeded: UserStore) -> None:
    assert _names(seeded, {"fullName": "rao"}) == ["Asha Rao", "Meera Rao"]
    assert _names(seeded, {"fullName": "RAO"}) == ["Asha Rao", "Meera Rao"]


def test_email_is_case_insensitive_substring(seeded: UserStore) -> None:
    assert _names(seeded, {"email": "Hospital"}) == ["Meera Rao", "John 100% Doe"]


def test_gender_is_exact(seeded: UserStore) -> None:
    assert _names(seeded, {"gender": "Female"}) == ["Asha Rao", "Meera Rao"]
    assert _names(seeded, {"gender": "Fem"}) == []


def test_role_id_accepts_query_string_values(seeded: UserStore) -> None:
    assert _names(seeded, {"roleId": "2"}) == ["Asha Rao", "John 100% Doe", "Priya Nair"]
    assert _names(seeded, {"roleId": 2}) == ["Asha Rao", "John 100% Doe", "Priya Nair"]


def test_conditions_are_and_combined(seeded: UserStore) -> None:
    assert _names(seeded, {"fullName": "rao", "roleId": "2"}) == ["Asha Rao"]
    assert _names(seeded, {"email": "clinic", "gender": "Male", "roleId": 1}) == ["Ravi Shankar"]
    assert _names(seeded, {"fullName": "rao", "email": "clinic", "gender": "Female", "roleId": "1"}) == []


def test_like_wildcards_match_literally(seeded: UserStore) -> None:
    assert _names(seeded, {"fullName": "%"}) == ["John 100% Doe"]
    assert _names(seeded, {"email": "_"}) == ["Priya Nair"]


def test_non_integer_role_id_rejected() -> None:
    with pytest.raises(InvalidArgumentError, match="roleId"):
        build_user_predicate({"roleId": "admin"})
