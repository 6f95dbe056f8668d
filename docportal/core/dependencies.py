"""
Dependency injection for FastAPI endpoints.
"""
from typing import Generator, Optional

from fastapi import BackgroundTasks, Depends, Header
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from docportal.core.config import settings
from docportal.core.exceptions import PermissionDenied
from docportal.core.permissions import require_admin
from docportal.core.session import PortalSession, resolve_session
from docportal.core.task_queue import TaskQueue
from docportal.db.base import SessionLocal
from docportal.services.file_service import FileService, get_file_service
from docportal.services.summarizer import Summarizer

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False)


def get_db() -> Generator:
    """
    Dependency for database session.

    Yields:
        Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_session(
    db: Session = Depends(get_db), token: Optional[str] = Depends(oauth2_scheme)
) -> PortalSession:
    """
    Resolve the caller's session from the bearer token.

    Raises:
        NotAuthenticated: If the token is missing, invalid or revoked
    """
    return resolve_session(db, token)


def get_optional_session(
    db: Session = Depends(get_db), token: Optional[str] = Depends(oauth2_scheme)
) -> Optional[PortalSession]:
    """Like ``get_current_session`` but anonymous callers get None."""
    if not token:
        return None
    return resolve_session(db, token)


def get_admin_session(session: PortalSession = Depends(get_current_session)) -> PortalSession:
    """Session of an admin caller."""
    return require_admin(session)


def get_storage() -> FileService:
    return get_file_service()


def get_summarizer() -> Summarizer:
    return Summarizer()


def get_task_queue(
    background_tasks: BackgroundTasks,
    storage: FileService = Depends(get_storage),
    summarizer: Summarizer = Depends(get_summarizer),
) -> TaskQueue:
    return TaskQueue(
        background_tasks=background_tasks,
        session_factory=SessionLocal,
        storage=storage,
        summarizer=summarizer,
    )


def verify_internal_token(x_internal_token: Optional[str] = Header(default=None)) -> None:
    """Guard for endpoints called by Cloud Tasks."""
    if not settings.INTERNAL_TASK_TOKEN or x_internal_token != settings.INTERNAL_TASK_TOKEN:
        raise PermissionDenied("Invalid internal task token")
