from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Book:
    """Catalog entry for a single title."""

    book_id: int
    title: str
    author: str
    genre: str
    publication: int
