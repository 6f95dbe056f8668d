"""
Document model and its review history.
"""
from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from docportal.db.base import Base
from docportal.models.choices import DocumentStatus, EnrichmentStatus, Priority, values_sql


class Document(Base):
    """Uploaded document and its review state."""

    __tablename__ = "documents"
    __table_args__ = (
        CheckConstraint(f"status IN ({values_sql(DocumentStatus)})", name="ck_documents_status"),
        CheckConstraint(
            f"priority IS NULL OR priority IN ({values_sql(Priority)})", name="ck_documents_priority"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    priority = Column(String, nullable=True, default=Priority.MEDIUM.value)  # high, medium, low
    deadline = Column(Date, nullable=True)
    file_name = Column(String, nullable=False)
    file_url = Column(String, nullable=False)
    content_type = Column(String, nullable=True)
    file_size = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default=DocumentStatus.PENDING.value, index=True)
    uploaded_by = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Filled in by the enrichment task
    parsed_text = Column(Text, nullable=True)
    summary = Column(Text, nullable=True)
    enrichment_status = Column(String, nullable=True, default=EnrichmentStatus.QUEUED.value)
    enrichment_error = Column(Text, nullable=True)

    # Relationships
    uploader = relationship("Profile", back_populates="uploaded_documents")
    assignments = relationship(
        "DocumentAssignment",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    review_events = relationship(
        "ReviewEvent", back_populates="document", cascade="all, delete-orphan", passive_deletes=True
    )


class ReviewEvent(Base):
    """Append-only record of a lifecycle transition."""

    __tablename__ = "review_events"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    actor_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    from_status = Column(String, nullable=False)
    to_status = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    document = relationship("Document", back_populates="review_events")
