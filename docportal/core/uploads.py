"""
Document upload: validate, store, record, assign, queue enrichment.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from docportal.core.assignments import stage_assignments, validate_employee_ids
from docportal.core.exceptions import ExternalServiceError, ValidationFailed
from docportal.core.permissions import require_admin
from docportal.core.session import PortalSession
from docportal.core.task_queue import TaskQueue
from docportal.models.choices import Category, DocumentStatus, EnrichmentStatus, Priority
from docportal.models.document import Document
from docportal.services.file_service import FileService
from docportal.utils.file_upload import check_upload_file

logger = logging.getLogger(__name__)


@dataclass
class UploadRequest:
    title: str
    category: str
    description: Optional[str] = None
    priority: Optional[str] = None
    deadline: Optional[date] = None
    employee_ids: Iterable[int] = ()
    filename: Optional[str] = None
    content: Optional[bytes] = None
    content_type: Optional[str] = None


@dataclass
class UploadOutcome:
    document: Document
    assigned_count: int
    warnings: List[str] = field(default_factory=list)


def _validate(db: Session, request: UploadRequest) -> tuple:
    """Check every field before anything is written."""
    if request.content is None or not request.filename:
        raise ValidationFailed("No file selected. Please select a document to upload")

    title = (request.title or "").strip()
    if not title or not request.category:
        raise ValidationFailed("Missing required fields: title and category are required")

    try:
        category = Category(request.category.strip().lower())
    except ValueError:
        allowed = ", ".join(c.value for c in Category)
        raise ValidationFailed(f"Unknown category '{request.category}'. Allowed: {allowed}")

    priority = Priority.MEDIUM
    if request.priority:
        try:
            priority = Priority(request.priority.strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in Priority)
            raise ValidationFailed(f"Unknown priority '{request.priority}'. Allowed: {allowed}")

    problem = check_upload_file(request.filename, len(request.content))
    if problem:
        raise ValidationFailed(problem)

    employee_ids = validate_employee_ids(db, request.employee_ids)
    return title, category, priority, employee_ids


def upload_document(
    db: Session,
    storage: FileService,
    task_queue: TaskQueue,
    actor: PortalSession,
    request: UploadRequest,
) -> UploadOutcome:
    """
    Create a pending document, assign it and queue its enrichment.

    Args:
        db: Database session
        storage: File storage backend
        task_queue: Enrichment dispatcher
        actor: Session of the uploading admin
        request: Form fields and file content

    Returns:
        UploadOutcome; a queueing failure is reported as a warning

    Raises:
        PermissionDenied: Actor is not an admin
        ValidationFailed: Missing or invalid input, nothing written
        ExternalServiceError: Storage or database failure, nothing kept
    """
    require_admin(actor, "upload documents")
    title, category, priority, employee_ids = _validate(db, request)

    file_info = storage.upload_file(
        request.content,  # type: ignore
        request.filename,  # type: ignore
        owner_id=actor.profile_id,
        content_type=request.content_type,
    )

    try:
        document = Document(
            title=title,
            category=category.value,
            description=(request.description or "").strip() or None,
            priority=priority.value,
            deadline=request.deadline,
            file_name=file_info["filename"],
            file_url=file_info["file_url"],
            content_type=file_info["content_type"],
            file_size=file_info["file_size"],
            status=DocumentStatus.PENDING.value,
            uploaded_by=actor.profile_id,
            enrichment_status=EnrichmentStatus.QUEUED.value,
        )
        db.add(document)
        db.flush()
        assigned = stage_assignments(db, document.id, employee_ids)  # type: ignore
        db.commit()
        db.refresh(document)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving document metadata for '{request.filename}': {e}")
        storage.delete_file(file_info["file_url"])
        raise ExternalServiceError("Failed to save document metadata")

    logger.info(
        f"Document '{title}' ({document.id}) uploaded by profile {actor.profile_id} "
        f"and assigned to {assigned} employee(s)"
    )

    warnings: List[str] = []
    try:
        task_queue.enqueue_enrichment(document.id, document.file_url)  # type: ignore
    except ExternalServiceError as e:
        warnings.append(f"Document saved, but summary generation could not be started: {e.detail}")
        document.enrichment_status = EnrichmentStatus.FAILED.value  # type: ignore
        document.enrichment_error = e.detail  # type: ignore
        db.commit()
        db.refresh(document)

    return UploadOutcome(document=document, assigned_count=assigned, warnings=warnings)
