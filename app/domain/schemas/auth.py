"""Pydantic schemas for User and Auth."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal, Optional


class UserCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=72)
    # Self-registration only creates viewers; admins come from ADMIN_EMAIL bootstrap
    role: Literal["viewer"] = "viewer"


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    message: str = "Login successful"
    access_token: str
    token_type: str = "bearer"
    user: UserRead
