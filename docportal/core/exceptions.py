"""
Domain errors raised by the portal core.

Each error carries the HTTP status it maps to; the handlers registered in
``docportal.main`` render them as JSON.
"""
from typing import Optional

from fastapi import status


class PortalError(Exception):
    """Base class for failures scoped to a single operation."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, redirect_to: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.redirect_to = redirect_to


class ValidationFailed(PortalError):
    """Missing or invalid input; nothing was written."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotAuthenticated(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail, redirect_to="sign_in")


class PermissionDenied(PortalError):
    """Wrong role for the requested action or screen."""

    status_code = status.HTTP_403_FORBIDDEN


class DocumentNotFound(PortalError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, document_id: int):
        super().__init__(f"Document with ID {document_id} not found")
        self.document_id = document_id


class InvalidTransition(PortalError):
    status_code = status.HTTP_409_CONFLICT


class ExternalServiceError(PortalError):
    """Storage, task queue or AI provider failure."""

    status_code = status.HTTP_502_BAD_GATEWAY
