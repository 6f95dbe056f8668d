"""
Authentication endpoints for sign-up, sign-in and sign-out.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from docportal.core.config import settings
from docportal.core.dependencies import get_current_session, get_db
from docportal.core.permissions import landing_screen
from docportal.core.security import create_access_token, get_password_hash, verify_password
from docportal.core.session import PortalSession, sign_out
from docportal.models.profile import Profile
from docportal.schemas.common import Message
from docportal.schemas.profile import Profile as ProfileSchema, ProfileCreate, Token

router = APIRouter()


@router.post("/signup", response_model=ProfileSchema, status_code=status.HTTP_201_CREATED)
def signup(profile_in: ProfileCreate, db: Session = Depends(get_db)) -> Any:
    """
    Register a new account and its profile.

    Args:
        profile_in: Email, password, full name, role and optional department
        db: Database session

    Returns:
        Created profile

    Raises:
        HTTPException: If email already exists
    """
    email = profile_in.email.lower()
    if db.query(Profile).filter(Profile.email == email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    profile = Profile(
        email=email,
        full_name=profile_in.full_name.strip(),
        hashed_password=get_password_hash(profile_in.password),
        role=profile_in.role.value,
        department=profile_in.department,
        is_active=True,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)

    return profile


@router.post("/login", response_model=Token)
def login(
    db: Session = Depends(get_db), form_data: OAuth2PasswordRequestForm = Depends()
) -> Any:
    """
    Login with email and password and return a JWT token.

    Args:
        db: Database session
        form_data: OAuth2 form data (username is the email)

    Returns:
        Access token plus the role's landing screen

    Raises:
        HTTPException: If credentials are missing or invalid
    """
    if not form_data.username or not form_data.password:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Email and password are required",
        )

    profile = db.query(Profile).filter(Profile.email == form_data.username.lower()).first()
    if not profile or not verify_password(form_data.password, profile.hashed_password):  # type: ignore
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not profile.is_active:  # type: ignore
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user",
        )

    profile.last_login = datetime.now(timezone.utc)  # type: ignore
    db.commit()

    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(subject=str(profile.id), role=str(profile.role), expires_delta=expires)
    session = PortalSession.for_profile(profile)

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": int(expires.total_seconds()),
        "role": session.role,
        "landing": landing_screen(session).value,
    }


@router.get("/me", response_model=ProfileSchema)
def read_current_profile(
    session: PortalSession = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> Any:
    """
    Get the profile behind the current session.
    """
    return db.query(Profile).filter(Profile.id == session.profile_id).first()


@router.post("/logout", response_model=Message)
def logout(
    session: PortalSession = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> Any:
    """
    Sign out: the current token stops resolving to a session.
    """
    sign_out(db, session)
    return {"message": "Signed out"}
