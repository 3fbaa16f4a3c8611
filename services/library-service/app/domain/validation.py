"""Field rules for account and book drafts.

Each validator collects every offending field before raising so callers can
report all problems in a single response.
"""

from __future__ import annotations

import re
from datetime import date

from email_validator import EmailNotValidError, validate_email

from .account import Role
from .contracts import AccountDraft, BookDraft, ProfileUpdate
from .errors import ValidationError

FULL_NAME_MIN = 10
FULL_NAME_MAX = 100
EMAIL_MAX = 120
PASSWORD_MAX = 100
BOOK_TEXT_MAX = 50
PUBLICATION_MIN = 0
# Largest key a BIGINT identity column can hold.
MAX_RECORD_ID = 2**63 - 1

_PHONE_RE = re.compile(r"^[0-9]{9,15}$")


def normalize_phone(phone: str | None) -> str | None:
    if phone is None or not phone.strip():
        return None
    return phone.strip()


def parse_role(value: str | None) -> Role | None:
    if value is None:
        return None
    try:
        return Role(value.strip().upper())
    except ValueError:
        return None


def validate_account_draft(draft: AccountDraft, *, require_password: bool) -> None:
    errors: dict[str, str] = {}
    _check_full_name(draft.full_name, errors)
    _check_email(draft.email, errors)
    _check_phone(draft.phone, errors)
    _check_role(draft.role, errors, required=True)

    if draft.register_date is not None and draft.register_date > date.today():
        errors["registerDate"] = "register date cannot be in the future"

    if require_password:
        if draft.password is None or not draft.password.strip():
            errors["password"] = "password is required"
        elif len(draft.password) > PASSWORD_MAX:
            errors["password"] = f"password must be at most {PASSWORD_MAX} characters"

    if errors:
        raise ValidationError(errors)


def validate_profile_update(update: ProfileUpdate) -> None:
    errors: dict[str, str] = {}
    _check_full_name(update.full_name, errors)
    _check_phone(update.phone, errors)
    if update.role is not None:
        _check_role(update.role, errors, required=False)
    if update.password is not None and len(update.password) > PASSWORD_MAX:
        errors["password"] = f"password must be at most {PASSWORD_MAX} characters"
    if errors:
        raise ValidationError(errors)


def validate_book_draft(draft: BookDraft) -> None:
    errors: dict[str, str] = {}
    for field, value in (("title", draft.title), ("author", draft.author), ("genre", draft.genre)):
        if value is None or not value.strip():
            errors[field] = f"{field} is required"
        elif len(value) > BOOK_TEXT_MAX:
            errors[field] = f"{field} must be between 1 and {BOOK_TEXT_MAX} characters"

    if draft.publication is None:
        errors["publication"] = "publication year is required"
    elif draft.publication < PUBLICATION_MIN:
        errors["publication"] = "publication year cannot be negative"
    elif draft.publication > date.today().year:
        errors["publication"] = "publication year cannot be later than the current year"

    if errors:
        raise ValidationError(errors)


def _check_full_name(value: str | None, errors: dict[str, str]) -> None:
    if value is None or not value.strip():
        errors["fullName"] = "full name is required"
    elif not FULL_NAME_MIN <= len(value) <= FULL_NAME_MAX:
        errors["fullName"] = (
            f"full name must be between {FULL_NAME_MIN} and {FULL_NAME_MAX} characters"
        )


def _check_email(value: str | None, errors: dict[str, str]) -> None:
    if value is None or not value.strip():
        errors["email"] = "email is required"
        return
    if len(value) > EMAIL_MAX:
        errors["email"] = f"email must be at most {EMAIL_MAX} characters"
        return
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        errors["email"] = "email is not a valid address"


def _check_phone(value: str | None, errors: dict[str, str]) -> None:
    phone = normalize_phone(value)
    if phone is not None and not _PHONE_RE.match(phone):
        errors["phone"] = "phone must contain between 9 and 15 digits"


def _check_role(value: str | None, errors: dict[str, str], *, required: bool) -> None:
    if value is None or not value.strip():
        if required:
            errors["role"] = "role is required"
        return
    if parse_role(value) is None:
        allowed = ", ".join(role.value for role in Role)
        errors["role"] = f"role must be one of {allowed}"
