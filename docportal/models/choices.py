"""
Enumerated values shared by models, schemas and core logic.
"""
from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"


class DocumentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Category(str, Enum):
    OPERATIONS = "operations"
    SAFETY = "safety"
    MAINTENANCE = "maintenance"
    HR = "hr"
    FINANCE = "finance"
    TECHNICAL = "technical"


class EnrichmentStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


def values_sql(enum_cls) -> str:
    """Render enum values as a SQL IN list for CHECK constraints."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
