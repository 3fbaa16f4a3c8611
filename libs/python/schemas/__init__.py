"""Shared schema exports."""

from .account import AccountRequest, AccountResponse, LoginRequest, ProfileUpdateRequest
from .book import BookRequest, BookResponse

__all__ = [
    "AccountRequest",
    "AccountResponse",
    "BookRequest",
    "BookResponse",
    "LoginRequest",
    "ProfileUpdateRequest",
]
