from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from docportal.db.base import Base
from docportal.models.choices import Priority, values_sql


class Alert(Base):
    """Notice broadcast by an admin to all staff."""

    __tablename__ = "alerts"
    __table_args__ = (
        CheckConstraint(f"level IN ({values_sql(Priority)})", name="ck_alerts_level"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    level = Column(String, nullable=False, default=Priority.MEDIUM.value)  # high, medium, low
    created_by = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
