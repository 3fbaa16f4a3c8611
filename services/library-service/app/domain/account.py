from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    LIBRARIAN = "LIBRARIAN"
    CLIENT = "CLIENT"


@dataclass(slots=True)
class Account:
    """Registered principal with login credentials and a flat role."""

    account_id: int
    full_name: str
    email: str
    password_hash: str
    role: Role
    register_date: date
    phone: str | None = None
