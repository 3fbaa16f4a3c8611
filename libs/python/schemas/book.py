"""Catalog wire models."""

from __future__ import annotations

from pydantic import BaseModel


class BookResponse(BaseModel):
    id: int
    title: str
    author: str
    genre: str
    publication: int


class BookRequest(BaseModel):
    title: str | None = None
    author: str | None = None
    genre: str | None = None
    publication: int | None = None
