"""
Contact form schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ContactRequest(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=320)
    subject: str | None = Field(default=None, max_length=300)
    message: str | None = Field(default=None, max_length=10_000)


class ContactResponse(BaseModel):
    success: bool = True
    message: str = "Email sent successfully"
