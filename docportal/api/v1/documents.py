"""
Document management endpoints: upload, review, assignment, enrichment.
"""
import logging
from datetime import date
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.orm import Session

from docportal.core import assignments, lifecycle
from docportal.core.dependencies import (
    get_admin_session,
    get_current_session,
    get_db,
    get_storage,
    get_summarizer,
    get_task_queue,
    verify_internal_token,
)
from docportal.core.enrichment import EnrichmentPipeline
from docportal.core.exceptions import DocumentNotFound
from docportal.core.permissions import admin_review_query, get_visible_document
from docportal.core.session import PortalSession
from docportal.core.task_queue import TaskQueue
from docportal.core.uploads import UploadRequest, upload_document
from docportal.models.choices import DocumentStatus
from docportal.models.document import Document
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
from docportal.schemas.profile import ProfileSummary
from docportal.services.file_service import FileService
from docportal.services.summarizer import Summarizer

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", response_model=UploadResult, status_code=status.HTTP_201_CREATED)
async def upload(
    title: str = Form(""),
    category: str = Form(""),
    description: Optional[str] = Form(None),
    priority: Optional[str] = Form(None),
    deadline: Optional[date] = Form(None),
    employee_ids: List[int] = Form([]),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_admin_session),
    storage: FileService = Depends(get_storage),
    task_queue: TaskQueue = Depends(get_task_queue),
) -> Any:
    """
    Upload a document, assign it and queue its summary.

    The document starts out pending. A failure to queue enrichment does not
    fail the upload; it is returned in ``warnings``.
    """
    content = await file.read() if file is not None else None
    request = UploadRequest(
        title=title,
        category=category,
        description=description,
        priority=priority,
        deadline=deadline,
        employee_ids=employee_ids,
        filename=file.filename if file is not None else None,
        content=content,
        content_type=file.content_type if file is not None else None,
    )
    outcome = upload_document(db, storage, task_queue, session, request)
    return UploadResult(
        document=DocumentDetail.model_validate(outcome.document),
        assigned_count=outcome.assigned_count,
        warnings=outcome.warnings,
    )


@router.get("", response_model=List[DocumentView])
def list_documents(
    status_filter: Optional[DocumentStatus] = Query(None, alias="status"),
    category: Optional[str] = None,
    uploaded_by: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_admin_session),
) -> Any:
    """
    List all documents (admin), newest first.

    Args:
        status_filter: Only documents in this status
        category: Only documents in this category
        uploaded_by: Only documents uploaded by this profile
    """
    query = db.query(Document)
    if status_filter is not None:
        query = query.filter(Document.status == status_filter.value)
    if category:
        query = query.filter(Document.category == category)
    if uploaded_by is not None:
        query = query.filter(Document.uploaded_by == uploaded_by)
    return query.order_by(Document.created_at.desc(), Document.id.desc()).offset(skip).limit(limit).all()


@router.get("/review", response_model=List[DocumentView])
def review_queue(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_admin_session),
) -> Any:
    """
    Pending documents awaiting review, regardless of assignment.
    """
    return admin_review_query(db, search).all()


@router.post("/internal/enrich", response_model=EnrichResponse, dependencies=[Depends(verify_internal_token)])
def enrich_internal(
    request: EnrichRequest,
    db: Session = Depends(get_db),
    storage: FileService = Depends(get_storage),
    summarizer: Summarizer = Depends(get_summarizer),
) -> Any:
    """
    Internal endpoint called by Cloud Tasks to enrich a document.
    """
    logger.info(f"Enriching document {request.document_id} from Cloud Tasks")
    result = EnrichmentPipeline(db, storage, summarizer).run(request.document_id, request.file_url)
    return EnrichResponse(
        success=True,
        document_id=result.document_id,
        extracted_text=result.extracted_text,
        summary=result.summary,
    )


@router.get("/{document_id}", response_model=DocumentDetail)
def get_document(
    document_id: int,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_current_session),
) -> Any:
    """
    Get a document with its extracted text and summary.

    Employees only reach approved documents assigned to them.
    """
    return get_visible_document(db, document_id, session)


@router.get("/{document_id}/download")
def download_document(
    document_id: int,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_current_session),
    storage: FileService = Depends(get_storage),
) -> Any:
    """
    Download the original file, or redirect to a signed URL where supported.
    """
    document = get_visible_document(db, document_id, session)
    signed_url = storage.generate_signed_url(str(document.file_url))
    if signed_url:
        return RedirectResponse(signed_url)

    content = storage.get_file_content(str(document.file_url))
    return Response(
        content=content,
        media_type=str(document.content_type or "application/octet-stream"),
        headers={"Content-Disposition": f'inline; filename="{document.file_name}"'},
    )


@router.post("/{document_id}/transition", response_model=DocumentDetail)
def transition_document(
    document_id: int,
    body: TransitionRequest,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_current_session),
) -> Any:
    """
    Approve or reject a pending document.
    """
    return lifecycle.transition(db, document_id, body.status, session)


@router.post("/{document_id}/approve", response_model=DocumentDetail)
def approve_document(
    document_id: int,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_current_session),
) -> Any:
    """
    Approve a document; it becomes visible to its assignees.
    """
    return lifecycle.transition(db, document_id, DocumentStatus.APPROVED, session)


@router.post("/{document_id}/reject", response_model=DocumentDetail)
def reject_document(
    document_id: int,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_current_session),
) -> Any:
    """
    Reject a document; it never becomes visible to employees.
    """
    return lifecycle.transition(db, document_id, DocumentStatus.REJECTED, session)


def _assignment_list(db: Session, document_id: int) -> AssignmentList:
    employees = assignments.list_assignee_profiles(db, document_id)
    return AssignmentList(
        document_id=document_id,
        assigned_count=len(employees),
        employees=[ProfileSummary.model_validate(p) for p in employees],
    )


@router.put("/{document_id}/assignments", response_model=AssignmentList)
def replace_assignments(
    document_id: int,
    body: AssignmentUpdate,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_current_session),
) -> Any:
    """
    Replace the full set of employees assigned to a document.
    """
    assignments.set_assignments(db, document_id, body.employee_ids, session)
    return _assignment_list(db, document_id)


@router.get("/{document_id}/assignments", response_model=AssignmentList)
def read_assignments(
    document_id: int,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_admin_session),
) -> Any:
    """
    Employees currently assigned to a document.
    """
    if db.query(Document.id).filter(Document.id == document_id).first() is None:
        raise DocumentNotFound(document_id)
    return _assignment_list(db, document_id)


@router.get("/{document_id}/enrichment", response_model=EnrichmentState)
def enrichment_state(
    document_id: int,
    db: Session = Depends(get_db),
    session: PortalSession = Depends(get_admin_session),
) -> Any:
    """
    Progress of the summary generation for a document.
    """
    document = db.query(Document).filter(Document.id == document_id).first()
    if document is None:
        raise DocumentNotFound(document_id)
    return EnrichmentState(
        document_id=document.id,  # type: ignore
        enrichment_status=document.enrichment_status,  # type: ignore
        enrichment_error=document.enrichment_error,  # type: ignore
        has_summary=bool(document.summary),
    )
