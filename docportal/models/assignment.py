"""
Assignment edges between documents and employees.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from docportal.db.base import Base


class DocumentAssignment(Base):
    """Document D is visible to employee E."""

    __tablename__ = "document_assignments"
    __table_args__ = (
        UniqueConstraint("document_id", "employee_id", name="uq_document_assignment"),
    )

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    employee_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assigned_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    document = relationship("Document", back_populates="assignments")
    employee = relationship("Profile", back_populates="assignments")
