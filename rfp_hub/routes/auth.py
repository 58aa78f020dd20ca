from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from rfp_hub.database import get_db
from rfp_hub.models.user import User
from rfp_hub.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserPublic,
)
from rfp_hub.schemas.common import ApiResponse
from rfp_hub.services.auth_service import (
    hash_password,
    verify_password,
    create_access_token,
)
from rfp_hub.middleware.auth import get_current_user

logger = structlog.get_logger()

router = APIRouter()


async def _get_active_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(
        select(User).where(User.id == user_id, User.is_active == True)  # noqa: E712
    )
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _auth_payload(user: User) -> AuthResponse:
    token = create_access_token(user_id=user.id, role=user.role, email=user.email)
    return AuthResponse(user=UserPublic.model_validate(user), token=token)


@router.post(
    "/register",
    response_model=ApiResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create a customer or supplier account and sign it in."""
    email = body.email.lower()
    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists",
        )

    user = User(
        email=email,
        password_hash=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        company=body.company,
        phone=body.phone,
        role=body.role,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, role=user.role)
    return ApiResponse(message="User registered successfully", data=_auth_payload(user))


@router.post("/login", response_model=ApiResponse[AuthResponse])
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate user and return a JWT."""
    result = await db.execute(select(User).where(User.email == body.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(body.password, user.password_hash):
        logger.info("login_failed", email=body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
        )

    logger.info("user_logged_in", user_id=user.id, role=user.role)
    return ApiResponse(message="Login successful", data=_auth_payload(user))


@router.get("/profile", response_model=ApiResponse[UserPublic])
async def get_profile(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_active_user(db, current_user["user_id"])
    return ApiResponse(
        message="Profile retrieved successfully", data=UserPublic.model_validate(user)
    )


@router.put("/profile", response_model=ApiResponse[UserPublic])
async def update_profile(
    body: ProfileUpdateRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_active_user(db, current_user["user_id"])
    changes = body.model_dump(exclude_unset=True)
    for key in ("first_name", "last_name"):
        if key in changes and changes[key] is None:
            del changes[key]
    for field, value in changes.items():
        setattr(user, field, value)
    await db.flush()
    await db.refresh(user)

    logger.info("profile_updated", user_id=user.id, fields=sorted(changes))
    return ApiResponse(
        message="Profile updated successfully", data=UserPublic.model_validate(user)
    )


@router.put("/change-password", response_model=ApiResponse[None])
async def change_password(
    body: ChangePasswordRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Change the authenticated user's password."""
    user = await _get_active_user(db, current_user["user_id"])

    if not verify_password(body.current_password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    user.password_hash = hash_password(body.new_password)
    await db.flush()

    logger.info("password_changed", user_id=user.id)
    return ApiResponse(message="Password changed successfully")
