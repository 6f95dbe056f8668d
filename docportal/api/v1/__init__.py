"""API v1 router."""
from fastapi import APIRouter

from docportal.api.v1 import alerts, auth, dashboard, documents, employee, profiles
from docportal.schemas.common import ErrorResponse

# Bodies written by the PortalError handler
SESSION_ERRORS = {
    401: {"model": ErrorResponse, "description": "Not signed in"},
    403: {"model": ErrorResponse, "description": "Signed in with the wrong role"},
}
DOCUMENT_ERRORS = {
    **SESSION_ERRORS,
    404: {"model": ErrorResponse, "description": "Document not found or not visible"},
    409: {"model": ErrorResponse, "description": "Document already reviewed"},
    502: {"model": ErrorResponse, "description": "Storage, database or summary service failed"},
}

api_router = APIRouter()

api_router.include_router(
    auth.router, prefix="/auth", tags=["Authentication"],
    responses={401: SESSION_ERRORS[401]},
)
api_router.include_router(
    profiles.router, prefix="/profiles", tags=["Profiles"], responses=SESSION_ERRORS
)
api_router.include_router(
    documents.router, prefix="/documents", tags=["Documents"], responses=DOCUMENT_ERRORS
)
api_router.include_router(
    employee.router, prefix="/employee", tags=["Employee"], responses=SESSION_ERRORS
)
api_router.include_router(
    alerts.router, prefix="/alerts", tags=["Alerts"], responses=SESSION_ERRORS
)
api_router.include_router(dashboard.router, tags=["Dashboard"], responses=SESSION_ERRORS)
