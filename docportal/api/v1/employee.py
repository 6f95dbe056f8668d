"""
Employee view: approved documents assigned to the caller.
"""
from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from docportal.core.dependencies import get_current_session, get_db
from docportal.core.permissions import employee_view_query, require_role
from docportal.core.session import PortalSession
from docportal.models.choices import Role
from docportal.schemas.document import DocumentView

router = APIRouter()


@router.get("/documents", response_model=List[DocumentView])
def my_documents(
    search: Optional[str] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_current_session),
) -> Any:
    """
    Approved documents assigned to the current employee.

    Args:
        search: Case-insensitive match on title or description
        category: Only this category
    """
    require_role(session, Role.EMPLOYEE, "view assigned documents")
    return employee_view_query(db, session.profile_id, search=search, category=category).all()
