"""
Per-request session context.

A ``PortalSession`` is resolved from the bearer token at the start of every
request and handed explicitly to access checks, the lifecycle engine and the
assignment ledger. Signing out revokes the token so later resolution fails.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from docportal.core.exceptions import NotAuthenticated
from docportal.core.security import decode_token
from docportal.models.choices import Role
from docportal.models.profile import Profile, RevokedToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PortalSession:
    """Identity of the caller for the lifetime of one request."""

    profile_id: int
    role: Role
    full_name: str
    email: str
    token_id: Optional[str] = None
    expires_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_employee(self) -> bool:
        return self.role == Role.EMPLOYEE

    @classmethod
    def for_profile(cls, profile: Profile, token_id: Optional[str] = None,
                    expires_at: Optional[datetime] = None) -> "PortalSession":
        return cls(
            profile_id=profile.id,  # type: ignore
            role=Role(profile.role),
            full_name=profile.full_name,  # type: ignore
            email=profile.email,  # type: ignore
            token_id=token_id,
            expires_at=expires_at,
        )


def resolve_session(db: Session, token: Optional[str]) -> PortalSession:
    """
    Resolve the session for a bearer token.

    Args:
        db: Database session
        token: Raw JWT, or None when the request carried no credentials

    Returns:
        The caller's session

    Raises:
        NotAuthenticated: If the token is missing, invalid, revoked, or its
            profile no longer exists or is inactive
    """
    if not token:
        raise NotAuthenticated("Not authenticated")

    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        raise NotAuthenticated()

    subject = payload.get("sub")
    token_id = payload.get("jti")
    if subject is None or token_id is None:
        raise NotAuthenticated()

    revoked = db.query(RevokedToken).filter(RevokedToken.jti == token_id).first()
    if revoked:
        raise NotAuthenticated("Session has been signed out")

    profile = db.query(Profile).filter(Profile.id == int(subject)).first()
    if profile is None or not profile.is_active:
        raise NotAuthenticated()

    expires_at = None
    if payload.get("exp") is not None:
        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)

    return PortalSession.for_profile(profile, token_id=token_id, expires_at=expires_at)


def sign_out(db: Session, session: PortalSession) -> None:
    """Revoke the token behind ``session``."""
    if session.token_id is None:
        return

    db.add(
        RevokedToken(
            jti=session.token_id,
            profile_id=session.profile_id,
            expires_at=session.expires_at or datetime.now(timezone.utc),
        )
    )
    db.commit()
    logger.info(f"Profile {session.profile_id} signed out")
