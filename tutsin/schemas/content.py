"""Pydantic schemas for blog posts and contact submissions."""

from datetime import datetime

from pydantic import EmailStr, Field

from tutsin.schemas.common import CamelModel


class BlogPostCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    excerpt: str = Field(..., min_length=1, max_length=1000)
    category: str = Field(..., min_length=1, max_length=100)
    image_url: str | None = Field(None, max_length=500)
    published: bool = False


class BlogPostUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, min_length=1)
    excerpt: str | None = Field(None, min_length=1, max_length=1000)
    category: str | None = Field(None, min_length=1, max_length=100)
    image_url: str | None = Field(None, max_length=500)
    published: bool | None = None


class BlogPostRead(CamelModel):
    id: str
    title: str
    content: str
    excerpt: str
    category: str
    image_url: str | None = None
    published: bool
    created_at: datetime
    updated_at: datetime


class ContactCreate(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    service: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=5000)


class ContactRead(CamelModel):
    id: str
    first_name: str
    last_name: str
    email: str
    service: str
    message: str
    created_at: datetime


class ContactResponse(CamelModel):
    message: str
    submission: ContactRead
