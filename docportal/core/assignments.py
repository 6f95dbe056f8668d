"""
Assignment ledger: which employees may see which documents.

The edge set of a document is always replaced as a whole. Replacement runs
in one transaction so a failed insert rolls back to the previous edge set
instead of leaving the document without assignees.
"""
import logging
from typing import Iterable, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from docportal.core.exceptions import DocumentNotFound, ExternalServiceError, ValidationFailed
from docportal.core.permissions import require_admin
from docportal.core.session import PortalSession
from docportal.models.assignment import DocumentAssignment
from docportal.models.choices import DocumentStatus, Role
from docportal.models.document import Document
from docportal.models.profile import Profile

logger = logging.getLogger(__name__)


def validate_employee_ids(db: Session, employee_ids: Iterable[int]) -> Set[int]:
    """
    Deduplicate ids and check each belongs to an active employee.

    Raises:
        ValidationFailed: If any id is unknown, inactive or not an employee
    """
    wanted = set(employee_ids)
    if not wanted:
        return wanted

    found = {
        row.id
        for row in db.query(Profile.id).filter(
            Profile.id.in_(wanted),
            Profile.role == Role.EMPLOYEE.value,
            Profile.is_active.is_(True),
        )
    }
    unknown = sorted(wanted - found)
    if unknown:
        raise ValidationFailed(f"Not active employees: {', '.join(str(i) for i in unknown)}")
    return wanted


def stage_assignments(db: Session, document_id: int, employee_ids: Set[int]) -> int:
    """
    Replace the edge set of ``document_id`` in the current transaction.

    Does not commit; the caller owns the transaction.
    """
    db.query(DocumentAssignment).filter(
        DocumentAssignment.document_id == document_id
    ).delete(synchronize_session=False)
    db.flush()

    for employee_id in sorted(employee_ids):
        db.add(DocumentAssignment(document_id=document_id, employee_id=employee_id))
    db.flush()
    return len(employee_ids)


def set_assignments(
    db: Session,
    document_id: int,
    employee_ids: Iterable[int],
    actor: PortalSession,
) -> int:
    """
    Make ``employee_ids`` exactly the assignees of a document.

    Args:
        db: Database session
        document_id: Target document
        employee_ids: New assignee set, may be empty to unassign everyone
        actor: Session of the acting admin

    Returns:
        Number of edges written

    Raises:
        PermissionDenied: Actor is not an admin
        DocumentNotFound: No such document
        ValidationFailed: An id is not an active employee
        ExternalServiceError: The write failed; previous edges are kept
    """
    require_admin(actor, "assign documents")

    exists = db.query(Document.id).filter(Document.id == document_id).first()
    if exists is None:
        raise DocumentNotFound(document_id)

    wanted = validate_employee_ids(db, employee_ids)

    try:
        written = stage_assignments(db, document_id, wanted)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to replace assignments for document {document_id}: {e}")
        raise ExternalServiceError("Failed to save assignments")

    logger.info(
        f"Document {document_id} assigned to {written} employee(s) by profile {actor.profile_id}"
    )
    return written


def list_assignees(db: Session, document_id: int) -> Set[int]:
    rows = db.query(DocumentAssignment.employee_id).filter(
        DocumentAssignment.document_id == document_id
    )
    return {row.employee_id for row in rows}


def list_assignee_profiles(db: Session, document_id: int) -> List[Profile]:
    return (
        db.query(Profile)
        .join(DocumentAssignment, DocumentAssignment.employee_id == Profile.id)
        .filter(DocumentAssignment.document_id == document_id)
        .order_by(Profile.full_name)
        .all()
    )


def list_assigned_documents(
    db: Session,
    employee_id: int,
    status: Optional[DocumentStatus] = DocumentStatus.APPROVED,
) -> Set[int]:
    """
    Ids of documents assigned to an employee.

    Args:
        db: Database session
        employee_id: Employee profile id
        status: Only documents in this status; None for every status
    """
    query = (
        db.query(DocumentAssignment.document_id)
        .join(Document, Document.id == DocumentAssignment.document_id)
        .filter(DocumentAssignment.employee_id == employee_id)
    )
    if status is not None:
        query = query.filter(Document.status == DocumentStatus(status).value)
    return {row.document_id for row in query}
