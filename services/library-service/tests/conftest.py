from __future__ import annotations

import itertools
from dataclasses import replace
from threading import Lock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api import routes
from app.api.books import router as books_router
from app.api.errors import register_exception_handlers
from app.domain.account import Account, Role
from app.domain.book import Book
from app.domain.catalog import CrudService
from app.domain.contracts import AccountDetails, AccountFields, BookDraft, DuplicateKeyError
from app.domain.service import AccountService
from app.domain.validation import validate_book_draft
from app.security.passwords import BcryptHasher


class FakeAccountRepository:
    """In-memory store mimicking the Postgres unique index on lower(email)."""

    def __init__(self) -> None:
        self._accounts: dict[int, Account] = {}
        self._ids = itertools.count(1)
        self._lock = Lock()
        self.email_lookups = 0

    def list_all(self) -> list[Account]:
        with self._lock:
            return [replace(self._accounts[key]) for key in sorted(self._accounts)]

    def list_by_role(self, role: str) -> list[Account]:
        return [account for account in self.list_all() if account.role.value == role]

    def get(self, account_id: int) -> Account | None:
        with self._lock:
            account = self._accounts.get(account_id)
            return replace(account) if account else None

    def get_by_email(self, email: str) -> Account | None:
        with self._lock:
            self.email_lookups += 1
            for account in self._accounts.values():
                if account.email.lower() == email.lower():
                    return replace(account)
        return None

    def insert(self, fields: AccountFields) -> Account:
        with self._lock:
            self._ensure_unique(fields.email, None)
            account = Account(
                account_id=next(self._ids),
                full_name=fields.full_name,
                email=fields.email,
                password_hash=fields.password_hash,
                role=fields.role,
                register_date=fields.register_date,
                phone=fields.phone,
            )
            self._accounts[account.account_id] = account
            return replace(account)

    def update_details(self, account_id: int, details: AccountDetails) -> Account | None:
        with self._lock:
            stored = self._accounts.get(account_id)
            if stored is None:
                return None
            # The index entry only changes when the lower-cased email does.
            if stored.email.lower() != details.email.lower():
                self._ensure_unique(details.email, account_id)
            return self._store(
                stored,
                full_name=details.full_name,
                email=details.email,
                role=details.role,
                phone=details.phone,
                register_date=details.register_date or stored.register_date,
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
        with self._lock:
            stored = self._accounts.get(account_id)
            if stored is None:
                return None
            return self._store(
                stored,
                full_name=full_name,
                phone=phone,
                role=role or stored.role,
                password_hash=password_hash or stored.password_hash,
            )

    def set_password_hash(self, account_id: int, password_hash: str) -> Account | None:
        with self._lock:
            stored = self._accounts.get(account_id)
            if stored is None:
                return None
            return self._store(stored, password_hash=password_hash)

    def delete(self, account_id: int) -> bool:
        with self._lock:
            return self._accounts.pop(account_id, None) is not None

    def seed(self, account: Account) -> None:
        """Store a record without constraint checks to simulate legacy data."""
        with self._lock:
            self._accounts[account.account_id] = account

    def _store(self, stored: Account, **columns) -> Account:
        account = replace(stored, **columns)
        self._accounts[account.account_id] = account
        return replace(account)

    def _ensure_unique(self, email: str, own_id: int | None) -> None:
        for other in self._accounts.values():
            if other.account_id != own_id and other.email.lower() == email.lower():
                raise DuplicateKeyError("email")


class FakeBookRepository:
    def __init__(self) -> None:
        self._books: dict[int, Book] = {}
        self._ids = itertools.count(1)

    def list_all(self) -> list[Book]:
        return [self._books[key] for key in sorted(self._books)]

    def get(self, record_id: int) -> Book | None:
        return self._books.get(record_id)

    def insert(self, draft: BookDraft) -> Book:
        book = Book(next(self._ids), draft.title, draft.author, draft.genre, draft.publication)
        self._books[book.book_id] = book
        return book

    def replace(self, record_id: int, draft: BookDraft) -> Book | None:
        if record_id not in self._books:
            return None
        book = Book(record_id, draft.title, draft.author, draft.genre, draft.publication)
        self._books[record_id] = book
        return book

    def delete(self, record_id: int) -> bool:
        return self._books.pop(record_id, None) is not None


@pytest.fixture
def hasher() -> BcryptHasher:
    # Lowest cost bcrypt accepts; keeps the suite fast.
    return BcryptHasher(rounds=4)


@pytest.fixture
def repository() -> FakeAccountRepository:
    return FakeAccountRepository()


@pytest.fixture
def service(repository, hasher) -> AccountService:
    return AccountService(repository, hasher)


@pytest.fixture
def api_client(service):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(routes.router)
    app.include_router(books_router)
    app.state.account_service = service
    app.state.book_service = CrudService(
        FakeBookRepository(),
        entity_name="book",
        validate=validate_book_draft,
    )

    original_limiter = routes.rate_limiter
    routes.rate_limiter = routes.SlidingWindowRateLimiter(max_requests=3, window_seconds=60)

    with TestClient(app) as client:
        yield client, service

    routes.rate_limiter = original_limiter
