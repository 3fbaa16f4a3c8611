"""Account service orchestrating persistence, uniqueness checks, and credential handling."""

from __future__ import annotations

import logging
import secrets
from datetime import date
from typing import Callable

from .account import Account
from .contracts import (
    AccountDetails,
    AccountDraft,
    AccountFields,
    AccountStore,
    CredentialHasher,
    DuplicateKeyError,
    ProfileUpdate,
)
from .errors import ConflictError, InvalidCredentialsError, NotFoundError
from .guard import UniquenessGuard
from .validation import (
    normalize_phone,
    parse_role,
    validate_account_draft,
    validate_profile_update,
)
from ..security.passwords import generate_temporary_password

logger = logging.getLogger(__name__)


class AccountService:
    """Account workflows over an injected store and credential hasher."""

    def __init__(
        self,
        repository: AccountStore,
        hasher: CredentialHasher,
        *,
        temp_password_length: int = 8,
    ) -> None:
        """Store dependencies used to orchestrate persistence and hashing."""
        self._repository = repository
        self._hasher = hasher
        self._guard = UniquenessGuard(repository)
        self._temp_password_length = temp_password_length
        self._decoy_hash: str | None = None

    def list_accounts(self) -> list[Account]:
        return self._repository.list_all()

    def list_by_role(self, role: str) -> list[Account]:
        """Return accounts holding ``role``; an unknown role matches nothing."""
        parsed = parse_role(role)
        if parsed is None:
            return []
        return self._repository.list_by_role(parsed.value)

    def get_by_id(self, account_id: int) -> Account:
        account = self._repository.get(account_id)
        if account is None:
            raise NotFoundError(f"account not found with id: {account_id}")
        return account

    def get_by_email(self, email: str) -> Account:
        account = self._repository.get_by_email(email)
        if account is None:
            raise NotFoundError(f"account not found with email: {email}")
        return account

    def create(self, draft: AccountDraft) -> Account:
        """Create an account from an administrative draft.

        The register date is taken from the draft when given, otherwise today.
        """
        validate_account_draft(draft, require_password=True)
        logger.info("creating account for %s", draft.email)
        account = self._insert(draft, register_date=draft.register_date or date.today())
        logger.info("account created with id %s", account.account_id)
        return account

    def register(self, draft: AccountDraft) -> Account:
        """Self-service sign-up; the register date is always stamped as today."""
        validate_account_draft(draft, require_password=True)
        logger.info("registering account for %s", draft.email)
        account = self._insert(draft, register_date=date.today())
        logger.info("account registered with id %s", account.account_id)
        return account

    def update(self, account_id: int, draft: AccountDraft) -> Account:
        """Replace the mutable fields of an account; the password is left untouched."""
        validate_account_draft(draft, require_password=False)
        existing = self.get_by_id(account_id)

        if existing.email.lower() != draft.email.lower():
            self._guard.check_available(draft.email, excluding_id=account_id)

        details = AccountDetails(
            full_name=draft.full_name,
            email=draft.email,
            role=parse_role(draft.role),
            phone=normalize_phone(draft.phone),
            register_date=draft.register_date,
        )
        account = self._write(
            account_id,
            draft.email,
            lambda: self._repository.update_details(account_id, details),
        )
        logger.info("account updated with id %s", account_id)
        return account

    def delete(self, account_id: int) -> None:
        if not self._repository.delete(account_id):
            logger.warning("cannot delete missing account %s", account_id)
            raise NotFoundError(f"account not found with id: {account_id}")
        logger.info("account deleted with id %s", account_id)

    def authenticate(self, email: str, password: str) -> Account:
        """Return the account whose credentials match.

        Unknown emails and wrong passwords raise the same error; a decoy
        verification keeps both paths comparable in cost.
        """
        account = self._repository.get_by_email(email)
        if account is None:
            self._hasher.verify(password, self._get_decoy_hash())
            logger.warning("login rejected for unknown email %s", email)
            raise InvalidCredentialsError()
        if not self._hasher.verify(password, account.password_hash):
            logger.warning("login rejected for %s: password mismatch", email)
            raise InvalidCredentialsError()
        logger.info("account %s authenticated with role %s", account.account_id, account.role.value)
        return account

    def recover(self, email: str) -> str:
        """Reset the password to a random temporary one and return it in plaintext."""
        account = self.get_by_email(email)
        temporary = generate_temporary_password(self._temp_password_length)
        password_hash = self._hasher.hash(temporary)
        self._write(
            account.account_id,
            account.email,
            lambda: self._repository.set_password_hash(account.account_id, password_hash),
        )
        logger.info("temporary password issued for account %s", account.account_id)
        return temporary

    def profile_update(self, account_id: int, update: ProfileUpdate) -> Account:
        """Apply self-service profile changes; email is never modified here."""
        validate_profile_update(update)
        password_hash = None
        if update.password is not None and update.password.strip():
            password_hash = self._hasher.hash(update.password)

        account = self._repository.update_profile(
            account_id,
            full_name=update.full_name,
            phone=normalize_phone(update.phone),
            role=parse_role(update.role),
            password_hash=password_hash,
        )
        if account is None:
            raise NotFoundError(f"account not found with id: {account_id}")
        logger.info("profile updated for account %s", account_id)
        return account

    def _insert(self, draft: AccountDraft, *, register_date: date) -> Account:
        self._guard.check_available(draft.email)
        fields = AccountFields(
            full_name=draft.full_name,
            email=draft.email,
            password_hash=self._hasher.hash(draft.password),
            role=parse_role(draft.role),
            register_date=register_date,
            phone=normalize_phone(draft.phone),
        )
        try:
            return self._repository.insert(fields)
        except DuplicateKeyError as exc:
            logger.warning("store rejected duplicate email %s", draft.email)
            raise ConflictError(f"email already registered: {draft.email}") from exc

    def _write(
        self,
        account_id: int,
        email: str,
        write: Callable[[], Account | None],
    ) -> Account:
        """Run a column-scoped store write, mapping store failures onto domain errors."""
        try:
            saved = write()
        except DuplicateKeyError as exc:
            logger.warning("store rejected duplicate email %s", email)
            raise ConflictError(f"email already registered: {email}") from exc
        if saved is None:
            raise NotFoundError(f"account not found with id: {account_id}")
        return saved

    def _get_decoy_hash(self) -> str:
        if self._decoy_hash is None:
            self._decoy_hash = self._hasher.hash(secrets.token_urlsafe(16))
        return self._decoy_hash
