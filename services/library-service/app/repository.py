"""Database repositories for account and catalog data."""

from __future__ import annotations

import logging

from psycopg.errors import UniqueViolation
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account, Role
from .domain.book import Book
from .domain.contracts import AccountDetails, AccountFields, BookDraft, DuplicateKeyError

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS accounts (
        account_id BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
        full_name VARCHAR(100) NOT NULL,
        email VARCHAR(120) NOT NULL,
        password_hash VARCHAR(200) NOT NULL,
        phone VARCHAR(20),
        register_date DATE NOT NULL DEFAULT CURRENT_DATE,
        role VARCHAR(20) NOT NULL
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS accounts_email_lower_key ON accounts (lower(email))",
    "CREATE INDEX IF NOT EXISTS accounts_role_idx ON accounts (role)",
    """
    CREATE TABLE IF NOT EXISTS books (
        book_id BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
        title VARCHAR(100) NOT NULL,
        author VARCHAR(100) NOT NULL,
        genre VARCHAR(50) NOT NULL,
        publication INTEGER NOT NULL
    )
    """,
)

_ACCOUNT_COLUMNS = "account_id, full_name, email, password_hash, role, register_date, phone"
_BOOK_COLUMNS = "book_id, title, author, genre, publication"


def bootstrap_schema(pool: ConnectionPool) -> None:
    """Create tables and indexes that do not exist yet."""
    with pool.connection() as conn:
        with conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)
        conn.commit()
    logger.info("database schema ensured")


class AccountRepository:
    """Postgres-backed account persistence.

    Email uniqueness is enforced by a unique index on ``lower(email)``;
    violations surface as ``DuplicateKeyError``.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def list_all(self) -> list[Account]:
        return self._fetch_many(f"SELECT {_ACCOUNT_COLUMNS} FROM accounts ORDER BY account_id")

    def list_by_role(self, role: str) -> list[Account]:
        return self._fetch_many(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE role = %s ORDER BY account_id",
            (role,),
        )

    def get(self, account_id: int) -> Account | None:
        """Fetch an account by id or return ``None``."""
        return self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_id = %s",
            (account_id,),
        )

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by email ignoring case, or return ``None``."""
        return self._fetch_one(
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE lower(email) = lower(%s)",
            (email,),
        )

    def insert(self, fields: AccountFields) -> Account:
        """Persist a new account and return it with the store-assigned id."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO accounts (full_name, email, password_hash, role, register_date, phone)
                        VALUES (%s, %s, %s, %s, %s, %s)
                        RETURNING {_ACCOUNT_COLUMNS}
                        """,
                        (
                            fields.full_name,
                            fields.email,
                            fields.password_hash,
                            fields.role.value,
                            fields.register_date,
                            fields.phone,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except UniqueViolation as exc:
            raise DuplicateKeyError("email") from exc
        return self._map_record(row)

    def update_details(self, account_id: int, details: AccountDetails) -> Account | None:
        """Overwrite the administrative columns; the password hash is never written here."""
        role = details.role.value
        return self._write_one(
            f"""
            UPDATE accounts
            SET full_name = %s, email = %s, role = %s, phone = %s,
                register_date = COALESCE(%s, register_date)
            WHERE account_id = %s
            RETURNING {_ACCOUNT_COLUMNS}
            """,
            (details.full_name, details.email, role, details.phone, details.register_date, account_id),
        )

    def update_profile(
        self,
        account_id: int,
        *,
        full_name: str,
        phone: str | None,
        role: Role | None,
        password_hash: str | None,
    ) -> Account | None:
        """Apply profile columns; a ``None`` role or hash keeps the stored value."""
        return self._write_one(
            f"""
            UPDATE accounts
            SET full_name = %s, phone = %s,
                role = COALESCE(%s, role),
                password_hash = COALESCE(%s, password_hash)
            WHERE account_id = %s
            RETURNING {_ACCOUNT_COLUMNS}
            """,
            (full_name, phone, role.value if role else None, password_hash, account_id),
        )

    def set_password_hash(self, account_id: int, password_hash: str) -> Account | None:
        return self._write_one(
            f"""
            UPDATE accounts SET password_hash = %s
            WHERE account_id = %s
            RETURNING {_ACCOUNT_COLUMNS}
            """,
            (password_hash, account_id),
        )

    def delete(self, account_id: int) -> bool:
        """Remove the row and report whether this call deleted it."""
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    "DELETE FROM accounts WHERE account_id = %s RETURNING account_id",
                    (account_id,),
                )
                deleted = cur.fetchone() is not None
            conn.commit()
        return deleted

    def _write_one(self, query: str, params: tuple) -> Account | None:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
                conn.commit()
        except UniqueViolation as exc:
            raise DuplicateKeyError("email") from exc
        if not row:
            return None
        return self._map_record(row)

    def _fetch_one(self, query: str, params: tuple) -> Account | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    def _fetch_many(self, query: str, params: tuple = ()) -> list[Account]:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        return [self._map_record(row) for row in rows]

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=row[0],
            full_name=row[1],
            email=row[2],
            password_hash=row[3],
            role=Role(row[4]),
            register_date=row[5],
            phone=row[6],
        )


class BookRepository:
    """Postgres-backed ``RecordStore`` for books."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def list_all(self) -> list[Book]:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(f"SELECT {_BOOK_COLUMNS} FROM books ORDER BY book_id ASC")
                rows = cur.fetchall()
        return [Book(*row) for row in rows]

    def get(self, record_id: int) -> Book | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(f"SELECT {_BOOK_COLUMNS} FROM books WHERE book_id = %s", (record_id,))
                row = cur.fetchone()
        return Book(*row) if row else None

    def insert(self, draft: BookDraft) -> Book:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO books (title, author, genre, publication)
                    VALUES (%s, %s, %s, %s)
                    RETURNING {_BOOK_COLUMNS}
                    """,
                    (draft.title, draft.author, draft.genre, draft.publication),
                )
                row = cur.fetchone()
            conn.commit()
        return Book(*row)

    def replace(self, record_id: int, draft: BookDraft) -> Book | None:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"""
                    UPDATE books
                    SET title = %s, author = %s, genre = %s, publication = %s
                    WHERE book_id = %s
                    RETURNING {_BOOK_COLUMNS}
                    """,
                    (draft.title, draft.author, draft.genre, draft.publication, record_id),
                )
                row = cur.fetchone()
            conn.commit()
        return Book(*row) if row else None

    def delete(self, record_id: int) -> bool:
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM books WHERE book_id = %s", (record_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted
