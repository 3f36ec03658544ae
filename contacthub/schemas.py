"""
Pydantic schemas for the contact manager API.
"""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes")
        return value


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    message: str


class ContactResponse(BaseModel):
    id: str
    name: str
    email: str
    photo: str = ""
    tags: list[str] = Field(default_factory=list)
    owner_id: str


class ContactUpdateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    email: str = Field(..., max_length=320)
    # Absent or "" leaves tags untouched; a non-empty string or any list replaces them.
    tags: Optional[Union[list[str], str]] = None


class ActivityResponse(BaseModel):
    id: str
    owner_id: str
    action: str
    contact_id: str
    timestamp: float


class HealthResponse(BaseModel):
    status: Literal["ok"]
