"""
Role checks and document visibility.

This module answers two questions for every request:
who may enter a screen or perform an action (role checks), and which
documents a caller may see (view predicates).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from docportal.core.exceptions import DocumentNotFound, PermissionDenied
from docportal.core.session import PortalSession
from docportal.models.assignment import DocumentAssignment
from docportal.models.choices import DocumentStatus, Role
from docportal.models.document import Document
from docportal.models.profile import Profile


class Screen(str, Enum):
    """Entry points of the portal."""

    SIGN_IN = "sign_in"
    ADMIN_DASHBOARD = "admin_dashboard"
    ADMIN_UPLOAD = "admin_upload"
    ADMIN_REVIEW = "admin_review"
    EMPLOYEE_DASHBOARD = "employee_dashboard"


SCREEN_ROLES = {
    Screen.ADMIN_DASHBOARD: Role.ADMIN,
    Screen.ADMIN_UPLOAD: Role.ADMIN,
    Screen.ADMIN_REVIEW: Role.ADMIN,
    Screen.EMPLOYEE_DASHBOARD: Role.EMPLOYEE,
}

LANDING_SCREENS = {
    Role.ADMIN: Screen.ADMIN_DASHBOARD,
    Role.EMPLOYEE: Screen.EMPLOYEE_DASHBOARD,
}


@dataclass(frozen=True)
class ScreenDecision:
    """Outcome of a screen entry check."""

    requested: Screen
    allowed: bool
    redirect_to: Optional[Screen] = None


def landing_screen(session: Optional[PortalSession]) -> Screen:
    """Return the screen an identity lands on after sign-in."""
    if session is None:
        return Screen.SIGN_IN
    return LANDING_SCREENS[session.role]


def resolve_screen(screen: Screen, session: Optional[PortalSession]) -> ScreenDecision:
    """
    Decide whether ``session`` may enter ``screen``.

    Rules:
    1. No session → only the sign-in screen, everything else redirects there
    2. Signed in and asking for sign-in → redirect to own landing
    3. Role matches the screen → allowed
    4. Role mismatch → redirect to own landing

    Args:
        screen: Requested screen
        session: Current session, None for anonymous callers

    Returns:
        ScreenDecision
    """
    if session is None:
        if screen == Screen.SIGN_IN:
            return ScreenDecision(requested=screen, allowed=True)
        return ScreenDecision(requested=screen, allowed=False, redirect_to=Screen.SIGN_IN)

    landing = landing_screen(session)
    if screen == Screen.SIGN_IN:
        return ScreenDecision(requested=screen, allowed=False, redirect_to=landing)

    if SCREEN_ROLES[screen] == session.role:
        return ScreenDecision(requested=screen, allowed=True)

    return ScreenDecision(requested=screen, allowed=False, redirect_to=landing)


def require_role(session: PortalSession, role: Role, action: str = "perform this action") -> PortalSession:
    """
    Raise unless ``session`` holds ``role``.

    Raises:
        PermissionDenied: Carries the caller's landing screen as redirect target
    """
    if session.role != role:
        raise PermissionDenied(
            f"Only {role.value} users can {action}",
            redirect_to=landing_screen(session).value,
        )
    return session


def require_admin(session: PortalSession, action: str = "perform this action") -> PortalSession:
    return require_role(session, Role.ADMIN, action)


def admin_review_query(db: Session, search: Optional[str] = None) -> Query:
    """All pending documents, regardless of assignment."""
    query = db.query(Document).filter(Document.status == DocumentStatus.PENDING.value)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.join(Profile, Profile.id == Document.uploaded_by).filter(
            or_(
                Document.title.ilike(pattern),
                Document.category.ilike(pattern),
                Profile.full_name.ilike(pattern),
            )
        )
    return query.order_by(Document.created_at.desc(), Document.id.desc())


def employee_view_query(
    db: Session,
    employee_id: int,
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> Query:
    """Approved documents holding an assignment edge to ``employee_id``."""
    query = (
        db.query(Document)
        .join(DocumentAssignment, DocumentAssignment.document_id == Document.id)
        .filter(
            DocumentAssignment.employee_id == employee_id,
            Document.status == DocumentStatus.APPROVED.value,
        )
    )
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(Document.title.ilike(pattern), Document.description.ilike(pattern))
        )
    if category:
        query = query.filter(Document.category == category)
    return query.order_by(Document.created_at.desc(), Document.id.desc())


def get_visible_document(db: Session, document_id: int, session: PortalSession) -> Document:
    """
    Load a document the caller may read.

    Admins read any document. Employees read only documents in their
    employee view; anything else is reported as not found.

    Raises:
        DocumentNotFound: If missing or not visible to the caller
    """
    if session.is_admin:
        document = db.query(Document).filter(Document.id == document_id).first()
    else:
        document = employee_view_query(db, session.profile_id).filter(
            Document.id == document_id
        ).first()

    if document is None:
        raise DocumentNotFound(document_id)
    return document
