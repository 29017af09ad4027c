"""
    User Authentication Endpoints
    Login, registration, logout, profile and password reset for dashboard users.
    Endpoints:
    - /loginUser: Authenticates a user and returns the profile with a JWT.
    - /registerUser: Creates a user and returns the profile with a JWT.
    - /logoutUser: Revokes every token issued to the user (token versioning).
    - /getProfile: Returns the authenticated user's profile.
    - /forgot-password: Issues a single-use reset token and mails the reset link.
    - /reset-password/{token}: Sets a new password using a reset token.
    Security Features:
    - Uniform responses on forgot-password to avoid leaking user existence.
    - Reset tokens stored as SHA-256 digests, single use, with expiry.
    - Token versioning to invalidate old tokens on logout and password change.
"""
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select

from clientdash.api.dependencies import get_current_user, get_db
from clientdash.core.config import settings
from clientdash.core.logging import get_logger
from clientdash.core.security import (
    create_access_token, generate_reset_token, get_password_hash, hash_reset_token, verify_password
)
from clientdash.models.password_reset import PasswordReset
from clientdash.models.user import User
from clientdash.schemas.auth import ForgotPasswordIn, Login, MessageOut, ResetPasswordIn
from clientdash.schemas.user import SessionOut, UserCreate, UserOut
from clientdash.services.mailer import deliver_reset_link

logger = get_logger(__name__)

router = APIRouter()

FORGOT_PASSWORD_MESSAGE = "If the email exists, a password reset link has been sent."


def _session_for(user: User) -> SessionOut:
    token = create_access_token(data={"sub": str(user.id)}, token_version=user.token_version)
    return SessionOut(id=user.id, name=user.name, email=user.email, token=token)


async def _find_user_by_email(db: AsyncSession, email: str):
    result = await db.execute(select(User).filter(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


@router.post("/loginUser", response_model=SessionOut)
async def login(login_data: Login, db: AsyncSession = Depends(get_db)):
    user = await _find_user_by_email(db, login_data.email)

    if not user or not verify_password(login_data.password, user.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    logger.info(f"User {user.id} logged in")
    return _session_for(user)


@router.post("/registerUser", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db: AsyncSession = Depends(get_db)):
    if await _find_user_by_email(db, user.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")

    new_user = User(name=user.name, email=user.email, password=get_password_hash(user.password))
    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)

    logger.info(f"User {new_user.id} registered")
    return _session_for(new_user)


@router.post("/logoutUser", response_model=MessageOut)
async def logout(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    current_user.token_version = (current_user.token_version or 1) + 1
    await db.commit()
    return {"message": "Logged out successfully"}


@router.get("/getProfile", response_model=UserOut)
async def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/forgot-password", response_model=MessageOut)
async def forgot_password(
    payload: ForgotPasswordIn,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db)
):
    user = await _find_user_by_email(db, payload.email)

    if user:
        token = generate_reset_token()
        db.add(PasswordReset(
            user_id=user.id,
            email=user.email,
            token_hash=hash_reset_token(token),
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
        ))
        await db.commit()

        background_tasks.add_task(deliver_reset_link, user.email, token)

    return {"message": FORGOT_PASSWORD_MESSAGE}


@router.post("/reset-password/{token}", response_model=MessageOut)
async def reset_password(token: str, payload: ResetPasswordIn, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(PasswordReset).filter(PasswordReset.token_hash == hash_reset_token(token))
    )
    pr = result.scalar_one_or_none()

    if not pr or pr.consumed_at is not None or pr.is_expired():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")

    result = await db.execute(select(User).filter(User.id == pr.user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")

    user.password = get_password_hash(payload.password)
    user.token_version = (user.token_version or 1) + 1
    pr.consumed_at = datetime.now(timezone.utc)
    await db.commit()

    logger.info(f"Password reset completed for user {user.id}")
    return {"message": "Password reset successful"}
