"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(default="", max_length=150)
    password: str = Field(default="", max_length=72)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int


@dataclass(frozen=True)
class AdminPrincipal:
    """
    The authenticated caller, as proven by a valid access token.
    """

    admin_id: int
