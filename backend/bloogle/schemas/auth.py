# bloogle/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
The auth pages post HTML forms, so these models validate the parsed form fields.
"""
from pydantic import BaseModel, EmailStr, Field


class RegisterIn(BaseModel):
    """
    Sign-up form fields.
    Validated before any database access.
    """
    username: str = Field(min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")  # Login name
    email: EmailStr  # Address the verification link is sent to
    password: str = Field(min_length=8, max_length=128)  # Plain text, hashed server-side


class LoginIn(BaseModel):
    """
    Login form fields.
    """
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=128)


class UserOut(BaseModel):
    """
    Public user information.
    Never contains the password hash or verification token.
    """
    id: int
    username: str
    email: str
    imageId: int | None = None
