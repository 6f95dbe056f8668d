"""
Pydantic schemas for Document model.
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel

from docportal.models.choices import DocumentStatus, EnrichmentStatus
from docportal.schemas.profile import ProfileSummary


class DocumentView(BaseModel):
    """Read-only document shape shared by admin and employee views."""

    id: int
    title: str
    category: str
    description: Optional[str] = None
    priority: Optional[str] = None
    status: DocumentStatus
    file_name: str
    uploaded_by: int
    created_at: Optional[datetime] = None
    summary: Optional[str] = None

    class Config:
        """Pydantic config."""

        from_attributes = True


class DocumentDetail(DocumentView):
    """Full document including extracted text and upload metadata."""

    file_url: str
    content_type: Optional[str] = None
    file_size: int
    deadline: Optional[date] = None
    parsed_text: Optional[str] = None
    enrichment_status: Optional[EnrichmentStatus] = None


class UploadResult(BaseModel):
    """Outcome of an upload; warnings are non-fatal."""

    document: DocumentDetail
    assigned_count: int
    warnings: List[str] = []


class TransitionRequest(BaseModel):
    status: str


class EnrichmentState(BaseModel):
    document_id: int
    enrichment_status: Optional[EnrichmentStatus] = None
    enrichment_error: Optional[str] = None
    has_summary: bool


class EnrichRequest(BaseModel):
    document_id: int
    file_url: Optional[str] = None


class EnrichResponse(BaseModel):
    success: bool
    document_id: int
    extracted_text: str
    summary: str


class AssignmentUpdate(BaseModel):
    employee_ids: List[int] = []


class AssignmentList(BaseModel):
    document_id: int
    assigned_count: int
    employees: List[ProfileSummary]
