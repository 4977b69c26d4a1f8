"""
Authentication endpoints and request-identity dependencies.

Sessions live in a signed cookie (Starlette SessionMiddleware) holding the
user id and role. Every protected route resolves the session into a
`CallerIdentity` through `get_caller` and hands that value to the service
layer; nothing reads the session after that point.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from werkzeug.security import generate_password_hash, check_password_hash

from jobboard.database import get_db
from jobboard.models.user import User, UserRole
from jobboard.schemas.auth import SignUpRequest, SignInRequest, AuthResponse
from jobboard.services.caller import CallerIdentity
from jobboard.services.errors import ConflictError, UnauthenticatedError

logger = logging.getLogger(__name__)
router = APIRouter()


def _start_session(request: Request, user: User) -> None:
    request.session.clear()
    request.session["user_id"] = str(user.id)
    request.session["role"] = user.role.value


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user_id=str(user.id),
        email=user.email,
        name=user.name,
        role=user.role.value,
    )


# Authentication Dependencies
async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Dependency to get the signed-in user from the session cookie.

    Raises:
        UnauthenticatedError: no session, or its user no longer exists
    """
    user_id = request.session.get("user_id")
    if not user_id:
        raise UnauthenticatedError("Authentication required")

    try:
        user_uuid = UUID(str(user_id))
    except ValueError:
        request.session.clear()
        raise UnauthenticatedError("Invalid session. Please sign in again.")

    result = await db.execute(
        select(User).where(User.id == user_uuid)
    )
    user = result.scalar_one_or_none()

    if not user:
        request.session.clear()
        raise UnauthenticatedError("Invalid session. Please sign in again.")

    return user


async def get_caller(
    current_user: User = Depends(get_current_user)
) -> CallerIdentity:
    """Dependency producing the explicit caller identity passed into services."""
    return CallerIdentity.from_user(current_user)


async def require_admin(
    caller: CallerIdentity = Depends(get_caller)
) -> CallerIdentity:
    """
    Dependency to require admin role.

    Raises:
        HTTPException 403: If the caller is not an admin
    """
    if not caller.is_admin:
        logger.warning(
            f"User {caller.email} (role={caller.role.value}) "
            f"attempted to access admin endpoint"
        )
        raise HTTPException(
            status_code=403,
            detail="Admin access required"
        )

    return caller


# Endpoints
@router.post("/sign-up", response_model=AuthResponse, status_code=201)
async def sign_up(
    payload: SignUpRequest,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Create an account and sign it in.

    Only an explicit "ADMIN" role creates an employer account; anything
    else creates an applicant.
    """
    result = await db.execute(
        select(User).where(User.email == payload.email)
    )
    if result.scalar_one_or_none():
        raise ConflictError("User already exists")

    role = UserRole.ADMIN if (payload.role or "").upper() == UserRole.ADMIN.value else UserRole.USER
    user = User(
        email=payload.email,
        name=payload.name.strip(),
        password_hash=generate_password_hash(payload.password),
        role=role,
    )
    db.add(user)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("User already exists")
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating user: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to create account. Please try again."
        )

    _start_session(request, user)
    logger.info(f"New {role.value} account: {user.email}")

    return _auth_response(user)


@router.post("/sign-in", response_model=AuthResponse)
async def sign_in(
    payload: SignInRequest,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Verify email and password and start a session.

    Returns:
        200: Signed in
        401: Unknown email or wrong password (not distinguished)
    """
    result = await db.execute(
        select(User).where(User.email == payload.email)
    )
    user = result.scalar_one_or_none()

    if not user or not check_password_hash(user.password_hash, payload.password):
        logger.warning(f"Failed sign-in for {payload.email}")
        raise UnauthenticatedError("Invalid credentials")

    _start_session(request, user)
    logger.info(f"Successful sign-in: {user.email}")

    return _auth_response(user)


@router.post("/sign-out")
async def sign_out(request: Request):
    """Clear the session cookie."""
    request.session.clear()
    return {"message": "Successfully signed out"}


@router.get("/me", response_model=AuthResponse)
async def me(current_user: User = Depends(get_current_user)):
    """The signed-in caller."""
    return _auth_response(current_user)
