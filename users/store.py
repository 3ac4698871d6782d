"""
users/store.py -- SQLAlchemy Core persistence layer for User records.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_user
is the mapper. Route, service, and auth code never touch SQL directly.

Uses SQLAlchemy Core (not ORM) so the dataclass in users/models.py remains the
authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change.

Security:
  All queries use bound parameters. No f-strings in SQL.

Usage:
    store = UserStore()                               # SQLite default
    store = UserStore("postgresql://user:pw@host/db") # PostgreSQL
    user_id = store.create_user(User(full_name="Asha Rao", email="asha@example.com"))
    page, total_pages, current = store.list_page(0, 10)
    store.close()
"""

from __future__ import annotations

import math
from pathlib import Path

from sqlalchemy import Column, Index, Integer, MetaData, String, Table, create_engine, event, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.sql.elements import ColumnElement

from users.models import User

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).parent / 'ums_users.db'}"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

user_table = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("full_name", String(255)),
    Column("email", String(255), unique=True),
    Column("gender", String(30)),
    Column("phone_number", String(30)),
    Column("specialization", String(255)),
    Column("qualification", String(255)),
    Column("experience_years", Integer, nullable=False, server_default="0"),
    Column("address", String(500)),
    Column("password_hash", String(255)),
    Column("enabled", Integer, nullable=False, server_default="0"),  # boolean stored as 0/1
    Column("role_id", Integer, nullable=False, server_default="1"),
    Column("national_id_number", String(30)),
    # Without AUTOINCREMENT SQLite hands a deleted max id to the next insert.
    sqlite_autoincrement=True,
)

# Emails are compared case-insensitively everywhere, so uniqueness is on the
# folded form too.
Index("uq_users_email_lower", func.lower(user_table.c.email), unique=True)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Every mutating method commits before returning -- there is no unit of work
    spanning several calls, and concurrent writers to the same id follow
    last-writer-wins.
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(user_table.insert().values(**_user_to_row(user)))
            conn.commit()
            return result.inserted_primary_key[0]

    def update_user(self, user: User) -> bool:
        """Overwrite every stored column of user.id with the dataclass values.

        The id itself is never written. Returns True if a row was updated,
        False if user.id was not found.
        """
        with self.engine.connect() as conn:
            result = conn.execute(user_table.update().where(user_table.c.id == user.id).values(**_user_to_row(user)))
            conn.commit()
        return result.rowcount > 0

    def delete_user(self, user_id: int) -> bool:
        """Permanently delete a user record. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(user_table.delete().where(user_table.c.id == user_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(user_table.select().where(user_table.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by email, ignoring case. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(
                user_table.select().where(func.lower(user_table.c.email) == email.lower()).order_by(user_table.c.id)
            ).first()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users in insertion (id) order."""
        with self.engine.connect() as conn:
            rows = conn.execute(user_table.select().order_by(user_table.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]

    def count_users(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(user_table)).scalar()
        return result or 0

    def list_page(self, page_index: int, page_size: int) -> tuple[list[User], int, int]:
        """Return (users, total_pages, page_index) for one zero-based page.

        page_size below 1 is clamped to 1 and a negative page_index to 0, so
        a bad query string never turns into a database error. A page past the
        end returns an empty list with the real total_pages.
        """
        page_size = max(page_size, 1)
        page_index = max(page_index, 0)
        total = self.count_users()
        with self.engine.connect() as conn:
            rows = conn.execute(
                user_table.select().order_by(user_table.c.id).limit(page_size).offset(page_index * page_size)
            ).fetchall()
        return [_row_to_user(r) for r in rows], math.ceil(total / page_size), page_index

    def list_sorted(self, field: str, descending: bool = False) -> list[User]:
        """Return all users ordered by one column.

        field is a column name of the users table; anything else raises
        KeyError. The id breaks ties so equal keys keep a stable order.
        """
        column = user_table.c[field]
        order = column.desc() if descending else column.asc()
        with self.engine.connect() as conn:
            rows = conn.execute(user_table.select().order_by(order, user_table.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]

    def query(self, predicate: ColumnElement[bool]) -> list[User]:
        """Return users matching a boolean clause built against user_table.

        users/filters.py produces these clauses from request criteria.
        """
        with self.engine.connect() as conn:
            rows = conn.execute(user_table.select().where(predicate).order_by(user_table.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _user_to_row(user: User) -> dict:
    return {
        "full_name": user.full_name,
        "email": user.email,
        "gender": user.gender,
        "phone_number": user.phone_number,
        "specialization": user.specialization,
        "qualification": user.qualification,
        "experience_years": user.experience_years,
        "address": user.address,
        "password_hash": user.password_hash,
        "enabled": 1 if user.enabled else 0,
        "role_id": user.role_id,
        "national_id_number": user.national_id_number,
    }


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        full_name=row.full_name,
        email=row.email,
        gender=row.gender,
        phone_number=row.phone_number,
        specialization=row.specialization,
        qualification=row.qualification,
        experience_years=row.experience_years,
        address=row.address,
        password_hash=row.password_hash,
        enabled=bool(row.enabled),
        role_id=row.role_id,
        national_id_number=row.national_id_number,
    )
