"""Pydantic schemas for client authentication and profiles."""

from datetime import datetime

from pydantic import EmailStr, Field

from tutsin.schemas.common import CamelModel


class ClientRegister(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    company: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)


class ClientLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class ClientProfileUpdate(CamelModel):
    """Partial update of the signed-in client's own profile."""
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=6, max_length=128)
    company: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)


class ClientRead(CamelModel):
    """Public client profile (never includes the password hash)."""
    id: str
    first_name: str
    last_name: str
    email: str
    company: str | None = None
    phone: str | None = None
    created_at: datetime
    updated_at: datetime


class ClientAuthResponse(CamelModel):
    message: str
    token: str
    client: ClientRead


class ClientMeResponse(CamelModel):
    client: ClientRead
