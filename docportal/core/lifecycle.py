"""
Document lifecycle: pending → approved | rejected.

Both approved and rejected are terminal. Only admins transition documents,
and only out of ``pending``. Repeating the transition a document already
went through succeeds without writing anything, so clients may retry.
"""
import logging
from typing import Dict, FrozenSet, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from docportal.core.exceptions import (
    DocumentNotFound,
    ExternalServiceError,
    InvalidTransition,
    ValidationFailed,
)
from docportal.core.permissions import require_admin
from docportal.core.session import PortalSession
from docportal.models.choices import DocumentStatus
from docportal.models.document import Document, ReviewEvent

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[DocumentStatus, FrozenSet[DocumentStatus]] = {
    DocumentStatus.PENDING: frozenset({DocumentStatus.APPROVED, DocumentStatus.REJECTED}),
    DocumentStatus.APPROVED: frozenset(),
    DocumentStatus.REJECTED: frozenset(),
}

REVIEW_TARGETS = TRANSITIONS[DocumentStatus.PENDING]


def parse_target(target_status: Union[str, DocumentStatus]) -> DocumentStatus:
    """
    Coerce a requested status into a reviewable target.

    Raises:
        ValidationFailed: If the value is not approved or rejected
    """
    try:
        target = DocumentStatus(target_status)
    except ValueError:
        target = None
    if target not in REVIEW_TARGETS:
        allowed = ", ".join(sorted(s.value for s in REVIEW_TARGETS))
        raise ValidationFailed(f"Target status must be one of: {allowed}")
    return target  # type: ignore


def can_transition(current: DocumentStatus, target: DocumentStatus) -> bool:
    return target in TRANSITIONS[current]


def transition(
    db: Session,
    document_id: int,
    target_status: Union[str, DocumentStatus],
    actor: PortalSession,
) -> Document:
    """
    Move a document to ``target_status``.

    Args:
        db: Database session
        document_id: Document to review
        target_status: approved or rejected
        actor: Session of the reviewing admin

    Returns:
        The document carrying its new status

    Raises:
        PermissionDenied: Actor is not an admin
        ValidationFailed: Target is not approved/rejected
        DocumentNotFound: No such document
        InvalidTransition: Document already left pending for another status
        ExternalServiceError: The write failed; nothing was changed
    """
    require_admin(actor, "review documents")
    target = parse_target(target_status)

    document = db.query(Document).filter(Document.id == document_id).first()
    if document is None:
        raise DocumentNotFound(document_id)

    current = DocumentStatus(document.status)
    if current == target:
        logger.info(f"Document {document_id} already {target.value}, nothing to do")
        return document

    if not can_transition(current, target):
        raise InvalidTransition(
            f"Document {document_id} is {current.value} and can no longer be {target.value}"
        )

    try:
        document.status = target.value  # type: ignore
        db.add(
            ReviewEvent(
                document_id=document.id,
                actor_id=actor.profile_id,
                from_status=current.value,
                to_status=target.value,
            )
        )
        db.commit()
        db.refresh(document)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to move document {document_id} to {target.value}: {e}")
        raise ExternalServiceError("Failed to update document status")

    logger.info(
        f"Document {document_id} moved {current.value} -> {target.value} by profile {actor.profile_id}"
    )
    return document
