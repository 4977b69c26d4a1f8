"""Profile-related Pydantic schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ProfileUpdateRequest(BaseModel):
    """Request body for updating the caller's profile (email and role are not editable)."""
    name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None


class ProfileResponse(BaseModel):
    """Response with the caller's profile."""
    user_id: str
    email: str
    role: str
    
    name: str
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    
    created_at: datetime
    updated_at: datetime
