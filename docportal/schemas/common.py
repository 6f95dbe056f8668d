"""
Common schemas for API responses.
"""
from typing import Optional

from pydantic import BaseModel


class Message(BaseModel):
    """Generic message response."""

    message: str


class ErrorResponse(BaseModel):
    """Error response schema."""

    detail: str
    redirect_to: Optional[str] = None
