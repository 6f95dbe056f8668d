import pytest

from docportal.core import assignments, lifecycle
from docportal.core.exceptions import DocumentNotFound
from docportal.core.permissions import (
    Screen,
    admin_review_query,
    employee_view_query,
    get_visible_document,
    landing_screen,
    resolve_screen,
)
from docportal.models.choices import DocumentStatus
from tests.conftest import headers_for, session_for


class TestScreens:
    @pytest.mark.parametrize("screen", [s for s in Screen if s != Screen.SIGN_IN])
    def test_anonymous_is_sent_to_sign_in(self, screen):
        decision = resolve_screen(screen, None)

        assert not decision.allowed
        assert decision.redirect_to == Screen.SIGN_IN

    def test_anonymous_may_sign_in(self):
        assert resolve_screen(Screen.SIGN_IN, None).allowed

    @pytest.mark.parametrize(
        "screen", [Screen.ADMIN_DASHBOARD, Screen.ADMIN_UPLOAD, Screen.ADMIN_REVIEW]
    )
    def test_employee_bounced_from_admin_screens(self, employee_1, screen):
        decision = resolve_screen(screen, session_for(employee_1))

        assert not decision.allowed
        assert decision.redirect_to == Screen.EMPLOYEE_DASHBOARD

    def test_admin_bounced_from_employee_dashboard(self, admin_session):
        decision = resolve_screen(Screen.EMPLOYEE_DASHBOARD, admin_session)

        assert decision.redirect_to == Screen.ADMIN_DASHBOARD

    def test_signed_in_user_skips_sign_in(self, admin_session):
        decision = resolve_screen(Screen.SIGN_IN, admin_session)

        assert not decision.allowed
        assert decision.redirect_to == Screen.ADMIN_DASHBOARD

    def test_landing_screens(self, admin_session, employee_1):
        assert landing_screen(None) == Screen.SIGN_IN
        assert landing_screen(admin_session) == Screen.ADMIN_DASHBOARD
        assert landing_screen(session_for(employee_1)) == Screen.EMPLOYEE_DASHBOARD

    def test_screen_endpoint(self, client, admin_headers, employee_1):
        response = client.get("/api/v1/screens/admin_review", headers=headers_for(employee_1))
        assert response.json() == {
            "screen": "admin_review",
            "allowed": False,
            "redirect_to": "employee_dashboard",
        }

        response = client.get("/api/v1/screens/admin_review", headers=admin_headers)
        assert response.json()["allowed"] is True

        response = client.get("/api/v1/screens/employee_dashboard")
        assert response.json()["redirect_to"] == "sign_in"


class TestViews:
    def test_review_view_is_all_pending(self, db, admin_session, make_document, employee_1):
        assigned = make_document(title="Assigned")
        unassigned = make_document(title="Unassigned")
        approved = make_document(title="Done", status=DocumentStatus.APPROVED)
        assignments.set_assignments(db, assigned.id, [employee_1.id], admin_session)

        ids = [d.id for d in admin_review_query(db).all()]

        assert set(ids) == {assigned.id, unassigned.id}
        assert approved.id not in ids

    def test_review_search_matches_uploader_name(self, db, make_document):
        doc = make_document(title="Track Inspection", category="maintenance")

        assert [d.id for d in admin_review_query(db, "ravi").all()] == [doc.id]
        assert [d.id for d in admin_review_query(db, "MAINT").all()] == [doc.id]
        assert admin_review_query(db, "payroll").all() == []

    def test_employee_view_requires_approval_and_assignment(
        self, db, admin_session, make_document, employee_1
    ):
        pending = make_document(title="Pending Assigned")
        approved = make_document(title="Approved Assigned")
        other = make_document(title="Approved Unassigned")
        for doc in (pending, approved):
            assignments.set_assignments(db, doc.id, [employee_1.id], admin_session)
        for doc in (approved, other):
            lifecycle.transition(db, doc.id, "approved", admin_session)

        ids = [d.id for d in employee_view_query(db, employee_1.id).all()]

        assert ids == [approved.id]

    def test_rejected_never_visible(self, db, admin_session, make_document, employee_1):
        doc = make_document()
        assignments.set_assignments(db, doc.id, [employee_1.id], admin_session)
        lifecycle.transition(db, doc.id, "rejected", admin_session)

        assert employee_view_query(db, employee_1.id).all() == []

    def test_employee_view_filters(self, db, admin_session, make_document, employee_1):
        safety = make_document(title="Evacuation Plan", category="safety",
                               status=DocumentStatus.APPROVED)
        hr = make_document(title="Leave Policy", category="hr", description="Annual leave",
                           status=DocumentStatus.APPROVED)
        for doc in (safety, hr):
            assignments.set_assignments(db, doc.id, [employee_1.id], admin_session)

        assert [d.id for d in employee_view_query(db, employee_1.id, category="hr")] == [hr.id]
        assert [d.id for d in employee_view_query(db, employee_1.id, search="annual")] == [hr.id]

    def test_unassigned_document_looks_missing(self, db, make_document, employee_1):
        doc = make_document(status=DocumentStatus.APPROVED)

        with pytest.raises(DocumentNotFound):
            get_visible_document(db, doc.id, session_for(employee_1))

    def test_admin_sees_any_document(self, db, admin_session, make_document):
        doc = make_document(status=DocumentStatus.REJECTED)

        assert get_visible_document(db, doc.id, admin_session).id == doc.id


class TestAccessEndpoints:
    def test_missing_token(self, client):
        response = client.get("/api/v1/documents/review")

        assert response.status_code == 401
        assert response.json()["redirect_to"] == "sign_in"

    def test_garbage_token(self, client):
        response = client.get(
            "/api/v1/documents/review", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401

    def test_employee_cannot_open_review(self, client, employee_1):
        response = client.get("/api/v1/documents/review", headers=headers_for(employee_1))

        assert response.status_code == 403
        assert response.json()["redirect_to"] == "employee_dashboard"

    def test_admin_cannot_open_employee_view(self, client, admin_headers):
        response = client.get("/api/v1/employee/documents", headers=admin_headers)

        assert response.status_code == 403
        assert response.json()["redirect_to"] == "admin_dashboard"

    def test_employee_document_detail(self, client, db, admin_session, make_document,
                                      employee_1, employee_2):
        doc = make_document(status=DocumentStatus.APPROVED)
        assignments.set_assignments(db, doc.id, [employee_1.id], admin_session)

        response = client.get(f"/api/v1/documents/{doc.id}", headers=headers_for(employee_1))
        assert response.status_code == 200
        assert response.json()["title"] == "Safety Bulletin"

        response = client.get(f"/api/v1/documents/{doc.id}", headers=headers_for(employee_2))
        assert response.status_code == 404

    def test_error_bodies_are_documented(self, client):
        schema = client.get("/api/v1/openapi.json").json()

        fields = schema["components"]["schemas"]["ErrorResponse"]["properties"]
        assert set(fields) == {"detail", "redirect_to"}
        responses = schema["paths"]["/api/v1/documents/{document_id}/approve"]["post"]["responses"]
        for code in ("401", "403", "404", "409"):
            ref = responses[code]["content"]["application/json"]["schema"]["$ref"]
            assert ref == "#/components/schemas/ErrorResponse"

        body = client.get("/api/v1/documents/review").json()
        assert set(body) <= set(fields)
