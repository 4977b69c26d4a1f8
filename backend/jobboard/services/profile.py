"""Profile management business logic."""
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.models.user import User
from jobboard.schemas.profile import ProfileResponse
from jobboard.services.caller import CallerIdentity
from jobboard.services.errors import NotFoundError, ValidationError

# Email and role never change through the profile
EDITABLE_FIELDS = {"name", "phone", "location", "bio", "skills", "experience", "education"}


def build_profile_response(user: User) -> ProfileResponse:
    """Build ProfileResponse from User model."""
    return ProfileResponse(
        user_id=str(user.id),
        email=user.email,
        role=user.role.value,
        name=user.name,
        phone=user.phone,
        location=user.location,
        bio=user.bio,
        skills=user.skills,
        experience=user.experience,
        education=user.education,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


async def get_profile(db: AsyncSession, caller: CallerIdentity) -> ProfileResponse:
    """The caller's own profile."""
    user = await db.get(User, caller.id)
    if not user:
        raise NotFoundError("User not found")
    return build_profile_response(user)


async def update_user_profile(db: AsyncSession, caller: CallerIdentity, update_data: dict) -> ProfileResponse:
    """Partially update the caller's profile fields."""
    user = await db.get(User, caller.id)
    if not user:
        raise NotFoundError("User not found")
    
    if "name" in update_data and not (update_data["name"] or "").strip():
        raise ValidationError("Name cannot be empty")
    
    for field, value in update_data.items():
        if field in EDITABLE_FIELDS:
            setattr(user, field, value)
    
    user.updated_at = datetime.utcnow()
    await db.commit()
    return build_profile_response(user)
