"""Domain-level request contracts and storage ports shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Generic, Protocol, TypeVar

from .account import Account, Role

RecordT = TypeVar("RecordT")
DraftT = TypeVar("DraftT")


class DuplicateKeyError(Exception):
    """Raised by a store when a unique constraint rejects a write."""

    def __init__(self, key: str) -> None:
        super().__init__(f"duplicate value for {key}")
        self.key = key


@dataclass(slots=True)
class AccountDraft:
    """Caller-supplied account fields prior to id assignment.

    ``password`` is plaintext and only consumed by create/register; update
    ignores it.
    """

    full_name: str | None
    email: str | None
    role: str | None
    password: str | None = None
    phone: str | None = None
    register_date: date | None = None


@dataclass(slots=True)
class ProfileUpdate:
    """Partial self-service changes; email is intentionally absent."""

    full_name: str | None
    phone: str | None = None
    role: str | None = None
    password: str | None = None


@dataclass(slots=True)
class AccountFields:
    """Validated, hashed values handed to the store for insertion."""

    full_name: str
    email: str
    password_hash: str
    role: Role
    register_date: date
    phone: str | None = None


@dataclass(slots=True)
class AccountDetails:
    """Columns owned by an administrative update; the password hash is not one of them.

    A ``register_date`` of ``None`` keeps the stored date.
    """

    full_name: str
    email: str
    role: Role
    phone: str | None = None
    register_date: date | None = None


@dataclass(slots=True)
class BookDraft:
    title: str | None
    author: str | None
    genre: str | None
    publication: int | None


class CredentialHasher(Protocol):
    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, hashed: str) -> bool: ...


class AccountStore(Protocol):
    """Keyed account persistence; email lookups are case-insensitive."""

    def list_all(self) -> list[Account]: ...

    def list_by_role(self, role: str) -> list[Account]: ...

    def get(self, account_id: int) -> Account | None: ...

    def get_by_email(self, email: str) -> Account | None: ...

    def insert(self, fields: AccountFields) -> Account: ...

    def update_details(self, account_id: int, details: AccountDetails) -> Account | None: ...

    def update_profile(
        self,
        account_id: int,
        *,
        full_name: str,
        phone: str | None,
        role: Role | None,
        password_hash: str | None,
    ) -> Account | None: ...

    def set_password_hash(self, account_id: int, password_hash: str) -> Account | None: ...

    def delete(self, account_id: int) -> bool: ...


class RecordStore(Protocol, Generic[RecordT, DraftT]):
    """Plain CRUD persistence for catalog-style entities."""

    def list_all(self) -> list[RecordT]: ...

    def get(self, record_id: int) -> RecordT | None: ...

    def insert(self, draft: DraftT) -> RecordT: ...

    def replace(self, record_id: int, draft: DraftT) -> RecordT | None: ...

    def delete(self, record_id: int) -> bool: ...
