"""
Role dashboards.

Admins and employees get separate builders over the same read-only
``DocumentView`` shape; ``build_dashboard`` picks one by the session role.
"""
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from docportal.core.permissions import admin_review_query, employee_view_query
from docportal.core.session import PortalSession
from docportal.models.alert import Alert
from docportal.models.choices import DocumentStatus, Priority, Role
from docportal.models.document import Document, ReviewEvent
from docportal.models.profile import Profile
from docportal.schemas.alert import Alert as AlertSchema
from docportal.schemas.dashboard import AdminDashboard, AdminStats, EmployeeDashboard, EmployeeStats
from docportal.schemas.document import DocumentView

RECENT_LIMIT = 5


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def build_admin_dashboard(db: Session, session: PortalSession, now: Optional[datetime] = None) -> AdminDashboard:
    now = now or datetime.now(timezone.utc)
    today = _start_of_day(now)
    month = today.replace(day=1)

    total_documents = db.query(func.count(Document.id)).scalar() or 0
    pending_reviews = (
        db.query(func.count(Document.id))
        .filter(Document.status == DocumentStatus.PENDING.value)
        .scalar()
        or 0
    )
    approved_today = (
        db.query(func.count(func.distinct(ReviewEvent.document_id)))
        .filter(
            ReviewEvent.to_status == DocumentStatus.APPROVED.value,
            ReviewEvent.created_at >= today,
        )
        .scalar()
        or 0
    )
    total_users = db.query(func.count(Profile.id)).scalar() or 0
    documents_this_month = (
        db.query(func.count(Document.id)).filter(Document.created_at >= month).scalar() or 0
    )

    pending = admin_review_query(db).limit(RECENT_LIMIT).all()
    return AdminDashboard(
        stats=AdminStats(
            total_documents=total_documents,
            pending_reviews=pending_reviews,
            approved_today=approved_today,
            total_users=total_users,
            documents_this_month=documents_this_month,
        ),
        pending_documents=[DocumentView.model_validate(doc) for doc in pending],
    )


def build_employee_dashboard(db: Session, session: PortalSession, now: Optional[datetime] = None) -> EmployeeDashboard:
    visible = employee_view_query(db, session.profile_id)
    assigned = visible.count()
    high_priority = visible.filter(Document.priority == Priority.HIGH.value).count()
    alerts_total = db.query(func.count(Alert.id)).scalar() or 0

    recent_documents = visible.limit(RECENT_LIMIT).all()
    recent_alerts = (
        db.query(Alert).order_by(Alert.created_at.desc(), Alert.id.desc()).limit(RECENT_LIMIT).all()
    )
    return EmployeeDashboard(
        stats=EmployeeStats(
            assigned_documents=assigned,
            high_priority_documents=high_priority,
            alerts=alerts_total,
        ),
        recent_documents=[DocumentView.model_validate(doc) for doc in recent_documents],
        recent_alerts=[AlertSchema.model_validate(alert) for alert in recent_alerts],
    )


DASHBOARD_BUILDERS: Dict[Role, Callable[..., Union[AdminDashboard, EmployeeDashboard]]] = {
    Role.ADMIN: build_admin_dashboard,
    Role.EMPLOYEE: build_employee_dashboard,
}


def build_dashboard(db: Session, session: PortalSession) -> Union[AdminDashboard, EmployeeDashboard]:
    return DASHBOARD_BUILDERS[session.role](db, session)
