"""
users/models.py -- Domain dataclasses for the user management service.

These are pure data containers with zero logic. Persistence lives in
users/store.py, business rules in users/service.py. The HTTP contract
(camelCase JSON, no password hash on the way out) lives in api/models.py.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class User:
    """A registered user.

    password_hash is a bcrypt hash; plaintext never reaches this object.
    enabled starts False and is flipped by the account-confirmation flow,
    an admin PUT, or the CLI. role_id references an external role table
    that is not enforced as a foreign key.

    id is None before the record is written to the database.
    """

    full_name: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    phone_number: Optional[str] = None
    specialization: Optional[str] = None
    qualification: Optional[str] = None
    experience_years: int = 0
    address: Optional[str] = None
    password_hash: Optional[str] = None
    enabled: bool = False
    role_id: int = 1
    national_id_number: Optional[str] = None
    id: Optional[int] = None


@dataclass
class UserPage:
    """One zero-based page of users plus the paging totals."""

    users: list[User] = field(default_factory=list)
    total_pages: int = 0
    current_page: int = 0
