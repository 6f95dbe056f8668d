from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from docportal.core.dependencies import get_admin_session, get_db
from docportal.core.session import PortalSession
from docportal.models.choices import Role
from docportal.models.profile import Profile
from docportal.schemas.profile import ProfileSummary

router = APIRouter()


@router.get("/employees", response_model=List[ProfileSummary])
def list_employees(
    department: Optional[str] = None,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_admin_session),
) -> Any:
    """
    Active employees that documents can be assigned to.
    """
    query = db.query(Profile).filter(
        Profile.role == Role.EMPLOYEE.value, Profile.is_active.is_(True)
    )
    if department:
        query = query.filter(Profile.department.ilike(department))
    return query.order_by(Profile.full_name).all()
