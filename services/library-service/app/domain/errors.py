"""Typed failures raised by the domain layer and translated at the HTTP boundary."""

from __future__ import annotations


class DomainError(Exception):
    """Base class for every failure the services report to callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """One or more fields of a draft are missing or malformed."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("validation failed: " + ", ".join(sorted(errors)))
        self.errors = errors


class ConflictError(DomainError):
    """A uniqueness constraint would be violated."""


class NotFoundError(DomainError):
    """No record exists for the given key."""


class InvalidCredentialsError(DomainError):
    """Authentication failed; deliberately silent about which part was wrong."""

    def __init__(self) -> None:
        super().__init__("invalid credentials")
