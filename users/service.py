"""
users/service.py -- Use cases over the User record store.

UserService owns the rules the store does not: "not found" is a failure
rather than None, update copies a fixed set of fields onto the stored row,
sort fields are validated against a whitelist before any SQL is built.

The HTTP layer catches the exceptions from users/exceptions.py and maps each
to a status code; this module knows nothing about HTTP.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from users.exceptions import DuplicateEmailError, InvalidArgumentError, UserNotFoundError
from users.filters import build_user_predicate
from users.models import User, UserPage
from users.store import UserStore

logger = logging.getLogger("ums.users")

# Sortable JSON field -> users table column.
SORTABLE_FIELDS: dict[str, str] = {
    "fullName": "full_name",
    "email": "email",
    "roleId": "role_id",
    "gender": "gender",
}

# Fields that update_user copies from the incoming data. gender and
# phone_number are deliberately absent: existing clients rely on an update
# leaving them as they were.
UPDATABLE_FIELDS: tuple[str, ...] = (
    "full_name",
    "email",
    "specialization",
    "qualification",
    "experience_years",
    "address",
    "password_hash",
    "enabled",
    "role_id",
    "national_id_number",
)


class UserService:
    """CRUD, paging, filtering, and sorting for users."""

    def __init__(self, store: UserStore) -> None:
        self._store = store

    def get_all_users(self) -> list[User]:
        return self._store.list_users()

    def get_user_by_id(self, user_id: int) -> User:
        user = self._store.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def update_user(self, user_id: int, new_data: User) -> User:
        """Overwrite the updatable fields of user_id with new_data and persist.

        Every field in UPDATABLE_FIELDS is replaced, including with None, so
        this is a full replace of those fields rather than a patch.

        Raises DuplicateEmailError when new_data.email belongs to another user,
        compared case-insensitively.
        """
        user = self.get_user_by_id(user_id)
        if new_data.email:
            owner = self._store.get_by_email(new_data.email)
            if owner is not None and owner.id != user_id:
                raise DuplicateEmailError(new_data.email)
        for name in UPDATABLE_FIELDS:
            setattr(user, name, getattr(new_data, name))
        if not self._store.update_user(user):
            # Deleted between the read and the write.
            raise UserNotFoundError(user_id)
        logger.info("Updated user %d", user_id)
        return user

    def delete_user(self, user_id: int) -> None:
        if not self._store.delete_user(user_id):
            raise UserNotFoundError(user_id)
        logger.info("Deleted user %d", user_id)

    def get_users(self, page: int, size: int) -> UserPage:
        users, total_pages, current_page = self._store.list_page(page, size)
        return UserPage(users=users, total_pages=total_pages, current_page=current_page)

    def filter_users(self, filters: Mapping[str, Any]) -> list[User]:
        return self._store.query(build_user_predicate(filters))

    def get_all_users_sorted(self, sort_by: str, direction: str) -> list[User]:
        """Return every user ordered by sort_by.

        direction "desc" (any case) sorts descending; any other value,
        including an empty string, sorts ascending.
        """
        column = SORTABLE_FIELDS.get(sort_by)
        if column is None:
            raise InvalidArgumentError(f"Invalid sorting field: {sort_by}")
        return self._store.list_sorted(column, descending=(direction or "").lower() == "desc")

    def register_user(self, user: User) -> User:
        """Create a new, not yet enabled account.

        Raises DuplicateEmailError when the email is already taken, compared
        case-insensitively. The caller is expected to have hashed the password.
        """
        if user.email and self._store.get_by_email(user.email) is not None:
            raise DuplicateEmailError(user.email)
        user.enabled = False
        user.id = None
        user_id = self._store.create_user(user)
        logger.info("Registered user %d", user_id)
        return self.get_user_by_id(user_id)
