"""The identity every service call acts on behalf of."""
from dataclasses import dataclass
from uuid import UUID

from jobboard.models.user import User, UserRole


@dataclass(frozen=True)
class CallerIdentity:
    """
    Who is making the request.
    
    Built once per request by the auth dependencies from the signed session
    and the user row, then passed explicitly into every service function.
    """
    id: UUID
    role: UserRole
    email: str = ""
    name: str = ""
    
    @classmethod
    def from_user(cls, user: User) -> "CallerIdentity":
        return cls(id=user.id, role=UserRole(user.role), email=user.email, name=user.name)
    
    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
