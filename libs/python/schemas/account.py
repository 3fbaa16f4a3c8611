"""Account-related wire models shared across services and clients."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class AccountResponse(BaseModel):
    """Public view of an account; the password hash is never part of it."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    full_name: str = Field(..., alias="fullName")
    email: str
    phone: str | None = None
    register_date: date = Field(..., alias="registerDate")
    role: str


class AccountRequest(BaseModel):
    """Full account draft accepted by create, register and update.

    Fields are optional at parse time so missing values are reported together
    with every other invalid field.
    """

    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, alias="fullName")
    email: str | None = None
    password: str | None = None
    phone: str | None = None
    register_date: date | None = Field(default=None, alias="registerDate")
    role: str | None = None


class ProfileUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, alias="fullName")
    phone: str | None = None
    role: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str
