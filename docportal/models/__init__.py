"""Models module - Import all models here for Alembic."""
from docportal.db.base import Base
from docportal.models.profile import Profile, RevokedToken
from docportal.models.document import Document, ReviewEvent
from docportal.models.assignment import DocumentAssignment
from docportal.models.alert import Alert

__all__ = ["Base", "Profile", "RevokedToken", "Document", "ReviewEvent", "DocumentAssignment", "Alert"]
