"""
Pydantic schemas for role dashboards.
"""
from typing import List, Optional

from pydantic import BaseModel

from docportal.schemas.alert import Alert
from docportal.schemas.document import DocumentView


class AdminStats(BaseModel):
    total_documents: int
    pending_reviews: int
    approved_today: int
    total_users: int
    documents_this_month: int


class AdminDashboard(BaseModel):
    role: str = "admin"
    stats: AdminStats
    pending_documents: List[DocumentView]


class EmployeeStats(BaseModel):
    assigned_documents: int
    high_priority_documents: int
    alerts: int


class EmployeeDashboard(BaseModel):
    role: str = "employee"
    stats: EmployeeStats
    recent_documents: List[DocumentView]
    recent_alerts: List[Alert]


class ScreenAccess(BaseModel):
    screen: str
    allowed: bool
    redirect_to: Optional[str] = None
