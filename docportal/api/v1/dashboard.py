from typing import Any, Optional, Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from docportal.core.dashboards import build_dashboard
from docportal.core.dependencies import get_current_session, get_db, get_optional_session
from docportal.core.permissions import Screen, resolve_screen
from docportal.core.session import PortalSession
from docportal.schemas.dashboard import AdminDashboard, EmployeeDashboard, ScreenAccess

router = APIRouter()


@router.get("/dashboard", response_model=Union[AdminDashboard, EmployeeDashboard])
def dashboard(
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_current_session),
) -> Any:
    """
    Landing dashboard for the caller's role.
    """
    return build_dashboard(db, session)


@router.get("/screens/{screen}", response_model=ScreenAccess)
def screen_access(
    screen: Screen,
    session: Optional[PortalSession] = Depends(get_optional_session),
) -> Any:
    """
    Whether the caller may enter ``screen``, and where to go instead.
    """
    decision = resolve_screen(screen, session)
    return ScreenAccess(
        screen=decision.requested.value,
        allowed=decision.allowed,
        redirect_to=decision.redirect_to.value if decision.redirect_to else None,
    )
