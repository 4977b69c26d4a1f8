"""Authentication-related Pydantic schemas."""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class SignUpRequest(BaseModel):
    """Create an account and start a session."""
    email: EmailStr
    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=8)
    role: Optional[str] = None  # "ADMIN" for employers, anything else is an applicant


class SignInRequest(BaseModel):
    """Password sign-in."""
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    """The signed-in caller."""
    user_id: str
    email: str
    name: str
    role: str
