from sqlalchemy.exc import SQLAlchemyError

from docportal.core import dependencies
from docportal.core.config import settings
from docportal.core.exceptions import ExternalServiceError
from docportal.core.task_queue import TaskQueue
from docportal.main import app
from docportal.models.assignment import DocumentAssignment
from docportal.models.choices import DocumentStatus
from docportal.models.document import Document
from tests.conftest import (
    OLE_HEADER,
    PDF_BYTES,
    FailingSummarizer,
    FakeOleFile,
    docx_bytes,
    headers_for,
    word97_streams,
)

UPLOAD_URL = "/api/v1/documents/upload"


def upload(client, headers, employee_ids=(), filename="bulletin.pdf", content=PDF_BYTES, **fields):
    data = {"title": "Safety Bulletin", "category": "safety", "priority": "high"}
    data.update(fields)
    data["employee_ids"] = [str(i) for i in employee_ids]
    files = {"file": (filename, content, "application/octet-stream")} if content is not None else None
    return client.post(UPLOAD_URL, data=data, files=files, headers=headers)


def stored_files(storage):
    if not storage.root.exists():
        return []
    return [p for p in storage.root.rglob("*") if p.is_file()]


class TestUploadValidation:
    def test_no_file_writes_nothing(self, client, db, admin_headers, storage):
        response = upload(client, admin_headers, content=None)

        assert response.status_code == 422
        assert "No file selected" in response.json()["detail"]
        assert db.query(Document).count() == 0
        assert stored_files(storage) == []

    def test_missing_title(self, client, db, admin_headers):
        response = upload(client, admin_headers, title="  ")

        assert response.status_code == 422
        assert db.query(Document).count() == 0

    def test_unknown_category(self, client, db, admin_headers):
        response = upload(client, admin_headers, category="marketing")

        assert response.status_code == 422
        assert "marketing" in response.json()["detail"]

    def test_unknown_priority(self, client, admin_headers):
        response = upload(client, admin_headers, priority="urgent")

        assert response.status_code == 422

    def test_disallowed_extension(self, client, db, admin_headers, storage):
        response = upload(client, admin_headers, filename="notes.txt", content=b"plain text")

        assert response.status_code == 422
        assert "File type not allowed" in response.json()["detail"]
        assert stored_files(storage) == []

    def test_empty_file(self, client, admin_headers):
        response = upload(client, admin_headers, content=b"")

        assert response.status_code == 422
        assert response.json()["detail"] == "File is empty"

    def test_file_too_large(self, client, admin_headers, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 16)

        response = upload(client, admin_headers)

        assert response.status_code == 422
        assert "maximum allowed size" in response.json()["detail"]

    def test_assignee_must_be_employee(self, client, db, admin, admin_headers, storage):
        response = upload(client, admin_headers, employee_ids=[admin.id])

        assert response.status_code == 422
        assert db.query(Document).count() == 0
        assert stored_files(storage) == []

    def test_employee_cannot_upload(self, client, db, employee_1):
        response = upload(client, headers_for(employee_1))

        assert response.status_code == 403
        assert db.query(Document).count() == 0


class TestUploadFlow:
    def test_upload_assign_approve(
        self, client, db, admin_headers, employee_1, employee_2, employee_3
    ):
        e1, e2, e3 = employee_1.id, employee_2.id, employee_3.id

        response = upload(client, admin_headers, employee_ids=[e1, e2], deadline="2026-11-30")

        assert response.status_code == 201
        body = response.json()
        document = body["document"]
        assert document["status"] == "pending"
        assert document["priority"] == "high"
        assert document["deadline"] == "2026-11-30"
        assert document["file_name"] == "bulletin.pdf"
        assert body["assigned_count"] == 2
        edges = db.query(DocumentAssignment).filter(
            DocumentAssignment.document_id == document["id"]
        ).all()
        assert {edge.employee_id for edge in edges} == {e1, e2}

        # Pending documents are invisible to assignees
        response = client.get("/api/v1/employee/documents", headers=headers_for(employee_1))
        assert response.json() == []

        review = client.get("/api/v1/documents/review", headers=admin_headers).json()
        assert [d["id"] for d in review] == [document["id"]]

        response = client.post(f"/api/v1/documents/{document['id']}/approve", headers=admin_headers)
        assert response.status_code == 200

        for employee in (employee_1, employee_2):
            visible = client.get("/api/v1/employee/documents", headers=headers_for(employee)).json()
            assert [d["id"] for d in visible] == [document["id"]]
        assert client.get("/api/v1/employee/documents", headers=headers_for(employee_3)).json() == []
        assert client.get("/api/v1/documents/review", headers=admin_headers).json() == []
        assert e3 not in {edge.employee_id for edge in edges}

    def test_priority_defaults_to_medium(self, client, admin_headers):
        response = upload(client, admin_headers, priority="")

        assert response.status_code == 201
        assert response.json()["document"]["priority"] == "medium"

    def test_failed_metadata_write_removes_file(self, client, db, admin_headers, storage,
                                                monkeypatch):
        def broken_commit():
            raise SQLAlchemyError("database is locked")

        monkeypatch.setattr(db, "commit", broken_commit)
        response = upload(client, admin_headers)
        monkeypatch.undo()

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to save document metadata"
        assert db.query(Document).count() == 0
        assert stored_files(storage) == []

    def test_download_returns_stored_bytes(self, client, admin_headers):
        document = upload(client, admin_headers).json()["document"]

        response = client.get(f"/api/v1/documents/{document['id']}/download", headers=admin_headers)

        assert response.status_code == 200
        assert response.content == PDF_BYTES

    def test_list_documents_filters(self, client, admin_headers, make_document):
        make_document(title="Old Policy", category="hr", status=DocumentStatus.APPROVED)
        make_document(title="New Shift Roster", category="operations")

        response = client.get("/api/v1/documents", params={"status": "approved"}, headers=admin_headers)
        assert [d["title"] for d in response.json()] == ["Old Policy"]

        response = client.get("/api/v1/documents", params={"category": "operations"},
                              headers=admin_headers)
        assert [d["title"] for d in response.json()] == ["New Shift Roster"]


class TestUploadEnrichment:
    def test_summary_written_after_upload(self, client, db, admin_headers, summarizer):
        content = docx_bytes("Platform 3 closes for maintenance.", "Use platform 4 instead.")

        response = upload(client, admin_headers, filename="closure.docx", content=content)

        assert response.status_code == 201
        document_id = response.json()["document"]["id"]
        db.expire_all()
        stored = db.get(Document, document_id)
        assert stored.status == "pending"
        assert "Platform 3 closes" in stored.parsed_text
        assert stored.summary.startswith("Summary of: Platform 3")
        assert stored.enrichment_status == "completed"
        assert len(summarizer.calls) == 1

        state = client.get(f"/api/v1/documents/{document_id}/enrichment", headers=admin_headers).json()
        assert state["enrichment_status"] == "completed"
        assert state["has_summary"] is True

    def test_summarizer_failure_keeps_document(self, client, db, admin_headers, employee_1):
        app.dependency_overrides[dependencies.get_summarizer] = FailingSummarizer
        content = docx_bytes("Quarterly fire drill schedule.")

        response = upload(client, admin_headers, employee_ids=[employee_1.id],
                          filename="drill.docx", content=content)

        assert response.status_code == 201
        document_id = response.json()["document"]["id"]
        db.expire_all()
        stored = db.get(Document, document_id)
        assert stored.status == "pending"
        assert stored.parsed_text is None
        assert stored.summary is None
        assert stored.enrichment_status == "failed"
        assert "503" in stored.enrichment_error
        assert db.query(DocumentAssignment).filter(
            DocumentAssignment.document_id == document_id
        ).count() == 1

    def test_queue_failure_is_a_warning(self, client, db, admin_headers, storage, summarizer):
        class UnavailableQueue(TaskQueue):
            def enqueue_enrichment(self, document_id, file_url):
                raise ExternalServiceError("Failed to queue enrichment: queue paused")

        def broken_queue():
            return UnavailableQueue(None, None, storage, summarizer, is_local=False)

        app.dependency_overrides[dependencies.get_task_queue] = broken_queue

        response = upload(client, admin_headers)

        assert response.status_code == 201
        body = response.json()
        assert len(body["warnings"]) == 1
        assert "queue paused" in body["warnings"][0]
        assert body["document"]["enrichment_status"] == "failed"
        assert db.query(Document).count() == 1

    def test_legacy_word_upload_is_summarized(self, client, db, admin_headers, monkeypatch):
        streams = word97_streams("Circular 14: revised night shift timings.")
        monkeypatch.setattr(
            "docportal.core.helpers.extracter.olefile.OleFileIO", lambda fp: FakeOleFile(streams)
        )

        response = upload(client, admin_headers, filename="circular.doc", content=OLE_HEADER)

        assert response.status_code == 201
        db.expire_all()
        stored = db.get(Document, response.json()["document"]["id"])
        assert stored.enrichment_status == "completed"
        assert stored.enrichment_error is None
        assert stored.parsed_text == "Circular 14: revised night shift timings."
        assert stored.summary.startswith("Summary of: Circular 14")
