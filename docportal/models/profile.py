"""
Profile model for authentication and role-based access.
"""
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from docportal.db.base import Base
from docportal.models.choices import Role, values_sql


class Profile(Base):
    """Authenticated account and its portal profile."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(f"role IN ({values_sql(Role)})", name="ck_profiles_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.EMPLOYEE.value)  # admin, employee
    department = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    uploaded_documents = relationship("Document", back_populates="uploader")
    assignments = relationship(
        "DocumentAssignment",
        back_populates="employee",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class RevokedToken(Base):
    """Access tokens invalidated by sign-out."""

    __tablename__ = "revoked_tokens"

    id = Column(Integer, primary_key=True, index=True)
    jti = Column(String, unique=True, index=True, nullable=False)
    profile_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
