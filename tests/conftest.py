"""
Global test fixtures for pytest.

Provides reusable fixtures for API testing:
- In-memory database shared by the test and the app
- Profiles and bearer headers by role
- Local file storage, fake summarizer and in-process task queue
"""
import io
import os
import struct

os.environ.setdefault("ENV", "local")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("INTERNAL_TASK_TOKEN", "internal-test-token")

import docx
import pytest
from fastapi import BackgroundTasks
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from docportal.core import dependencies
from docportal.core.exceptions import ExternalServiceError
from docportal.core.security import create_access_token, get_password_hash
from docportal.core.session import PortalSession
from docportal.core.task_queue import TaskQueue
from docportal.main import app
from docportal.models import Base
from docportal.models.choices import DocumentStatus, Role
from docportal.models.document import Document
from docportal.models.profile import Profile
from docportal.services.file_service import LocalFileService
from docportal.services.summarizer import Summarizer

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)

# Smallest byte sequence libmagic reports as application/pdf
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


def docx_bytes(*paragraphs):
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


# OLE2 compound file signature, padded to one header sector
OLE_HEADER = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 504


def word97_streams(*paragraphs):
    """WordDocument and 1Table streams of a Word 97 file with one cp1252 piece."""
    text = "".join(p + "\r" for p in paragraphs).encode("cp1252")
    word = bytearray(0x400) + text
    struct.pack_into("<H", word, 0, 0xA5EC)
    struct.pack_into("<H", word, 0x0A, 0x0200)  # piece table lives in 1Table
    struct.pack_into("<H", word, 32, 14)
    struct.pack_into("<H", word, 62, 22)
    struct.pack_into("<i", word, 0x4C, len(text))
    struct.pack_into("<H", word, 0x98, 93)

    prc = b"\x01" + struct.pack("<h", 3) + b"\x00\x00\x00"
    plc = struct.pack("<II", 0, len(text)) + struct.pack("<HIH", 0, (0x400 * 2) | 0x40000000, 0)
    clx = prc + b"\x02" + struct.pack("<I", len(plc)) + plc
    struct.pack_into("<II", word, 0x1A2, 16, len(clx))
    return {"WordDocument": bytes(word), "1Table": b"\x00" * 16 + clx}


class FakeOleFile:
    def __init__(self, streams):
        self.streams = streams

    def openstream(self, name):
        return io.BytesIO(self.streams[name])

    def close(self):
        pass


class FakeSummarizer(Summarizer):
    """Summarizer that never leaves the process."""

    def __init__(self):
        super().__init__(api_key="test-key")
        self.calls = []

    def summarize(self, text: str) -> str:
        self.calls.append(text)
        return f"Summary of: {text[:40]}"


class FailingSummarizer(Summarizer):
    """Simulates the AI provider returning an error."""

    def __init__(self):
        super().__init__(api_key="test-key")

    def summarize(self, text: str) -> str:
        raise ExternalServiceError("Summary generation failed: 503 Service Unavailable")


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# ============================================================================
# Profiles
# ============================================================================

def make_profile(db, email, full_name, role=Role.EMPLOYEE, department=None, is_active=True):
    profile = Profile(
        email=email,
        full_name=full_name,
        hashed_password=PASSWORD_HASH,
        role=role.value,
        department=department,
        is_active=is_active,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def headers_for(profile):
    token = create_access_token(subject=str(profile.id), role=str(profile.role))
    return {"Authorization": f"Bearer {token}"}


def session_for(profile):
    return PortalSession.for_profile(profile)


@pytest.fixture
def admin(db):
    return make_profile(db, "ravi@kmrl.co.in", "Ravi Kumar", Role.ADMIN, "Administration")


@pytest.fixture
def employee_1(db):
    return make_profile(db, "priya@kmrl.co.in", "Priya Nair", department="Operations")


@pytest.fixture
def employee_2(db):
    return make_profile(db, "john@kmrl.co.in", "John Doe", department="Maintenance")


@pytest.fixture
def employee_3(db):
    return make_profile(db, "sarah@kmrl.co.in", "Sarah Thomas", department="Human Resources")


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture
def admin_session(admin):
    return session_for(admin)


# ============================================================================
# Documents
# ============================================================================

@pytest.fixture
def make_document(db, admin):
    """Factory for document rows that bypasses upload."""

    def _make(title="Safety Bulletin", category="safety", priority="high",
              status=DocumentStatus.PENDING, description=None):
        document = Document(
            title=title,
            category=category,
            description=description,
            priority=priority,
            file_name=f"{title.lower().replace(' ', '-')}.pdf",
            file_url=f"documents/profile_{admin.id}/{title.lower().replace(' ', '-')}.pdf",
            content_type="application/pdf",
            file_size=1024,
            status=status.value,
            uploaded_by=admin.id,
        )
        db.add(document)
        db.commit()
        db.refresh(document)
        return document

    return _make


# ============================================================================
# Collaborators
# ============================================================================

@pytest.fixture
def storage(tmp_path):
    return LocalFileService(root=str(tmp_path / "uploads"))


@pytest.fixture
def summarizer():
    return FakeSummarizer()


@pytest.fixture
def client(db, storage, summarizer):
    """
    API client wired to the test database and in-process collaborators.

    Background enrichment opens its own session on the same in-memory
    database, the way the real task opens one from SessionLocal.
    """

    def override_get_db():
        yield db

    def override_task_queue(background_tasks: BackgroundTasks):
        return TaskQueue(
            background_tasks=background_tasks,
            session_factory=TestingSessionLocal,
            storage=storage,
            summarizer=app.dependency_overrides[dependencies.get_summarizer](),
            is_local=True,
        )

    app.dependency_overrides[dependencies.get_db] = override_get_db
    app.dependency_overrides[dependencies.get_storage] = lambda: storage
    app.dependency_overrides[dependencies.get_summarizer] = lambda: summarizer
    app.dependency_overrides[dependencies.get_task_queue] = override_task_queue

    yield TestClient(app)

    app.dependency_overrides.clear()
