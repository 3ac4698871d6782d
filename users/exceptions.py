"""
users/exceptions.py -- Typed failures raised by the user service.

The HTTP layer maps each of these to a fixed status code in api/main.py.
"""


class UserNotFoundError(LookupError):
    """No user row exists for the requested id."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User not found with ID: {user_id}")
        self.user_id = user_id


class InvalidArgumentError(ValueError):
    """A caller-supplied argument (sort field, filter value) is not acceptable."""


class DuplicateEmailError(ValueError):
    """Another user already owns this email address (case-insensitive)."""

    def __init__(self, email: str) -> None:
        super().__init__(f"A user with email {email} already exists.")
        self.email = email
