import logging
from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from docportal.core.dependencies import get_admin_session, get_current_session, get_db
from docportal.core.session import PortalSession
from docportal.models.alert import Alert
from docportal.schemas.alert import Alert as AlertSchema, AlertCreate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[AlertSchema])
def list_alerts(
    limit: int = 50,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_current_session),
) -> Any:
    """Alerts for all staff, newest first."""
    return db.query(Alert).order_by(Alert.created_at.desc(), Alert.id.desc()).limit(limit).all()


@router.post("", response_model=AlertSchema, status_code=status.HTTP_201_CREATED)
def create_alert(
    alert_in: AlertCreate,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_admin_session),
) -> Any:
    """Broadcast an alert (admin)."""
    alert = Alert(
        title=alert_in.title.strip(),
        description=alert_in.description.strip(),
        level=alert_in.level.value,
        created_by=session.profile_id,
    )
    db.add(alert)
    db.commit()
    db.refresh(alert)
    logger.info(f"Alert {alert.id} created by profile {session.profile_id}")
    return alert
