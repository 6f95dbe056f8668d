"""Schemas module - Import all schemas."""
from docportal.schemas.profile import Profile, ProfileCreate, ProfileSummary, Token
from docportal.schemas.document import (
    AssignmentList,
    AssignmentUpdate,
    DocumentDetail,
    DocumentView,
    EnrichmentState,
    EnrichRequest,
    EnrichResponse,
    TransitionRequest,
    UploadResult,
)
from docportal.schemas.alert import Alert, AlertCreate
from docportal.schemas.dashboard import AdminDashboard, EmployeeDashboard, ScreenAccess
from docportal.schemas.common import Message, ErrorResponse

__all__ = [
    "Profile",
    "ProfileCreate",
    "ProfileSummary",
    "Token",
    "AssignmentList",
    "AssignmentUpdate",
    "DocumentDetail",
    "DocumentView",
    "EnrichmentState",
    "EnrichRequest",
    "EnrichResponse",
    "TransitionRequest",
    "UploadResult",
    "Alert",
    "AlertCreate",
    "AdminDashboard",
    "EmployeeDashboard",
    "ScreenAccess",
    "Message",
    "ErrorResponse",
]
