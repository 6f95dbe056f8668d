from docportal.core import assignments, lifecycle
from docportal.core.dashboards import DASHBOARD_BUILDERS, build_admin_dashboard, build_dashboard
from docportal.models.choices import DocumentStatus, Role
from docportal.schemas.dashboard import AdminDashboard, EmployeeDashboard
from tests.conftest import headers_for, session_for


class TestBuilders:
    def test_one_builder_per_role(self):
        assert set(DASHBOARD_BUILDERS) == set(Role)

    def test_admin_stats(self, db, admin_session, make_document, employee_1, employee_2):
        first = make_document(title="Signal Upgrade")
        make_document(title="Depot Rules")
        make_document(title="Archived", status=DocumentStatus.REJECTED)
        lifecycle.transition(db, first.id, "approved", admin_session)

        dashboard = build_admin_dashboard(db, admin_session)

        assert dashboard.stats.total_documents == 3
        assert dashboard.stats.pending_reviews == 1
        assert dashboard.stats.approved_today == 1
        assert dashboard.stats.total_users == 3
        assert dashboard.stats.documents_this_month == 3
        assert [d.title for d in dashboard.pending_documents] == ["Depot Rules"]

    def test_employee_dashboard(self, db, admin_session, make_document, employee_1):
        urgent = make_document(title="Evacuation", priority="high", status=DocumentStatus.APPROVED)
        routine = make_document(title="Canteen Menu", priority="low", status=DocumentStatus.APPROVED)
        hidden = make_document(title="Draft", priority="high")
        for doc in (urgent, routine, hidden):
            assignments.set_assignments(db, doc.id, [employee_1.id], admin_session)

        dashboard = build_dashboard(db, session_for(employee_1))

        assert isinstance(dashboard, EmployeeDashboard)
        assert dashboard.stats.assigned_documents == 2
        assert dashboard.stats.high_priority_documents == 1
        assert {d.title for d in dashboard.recent_documents} == {"Evacuation", "Canteen Menu"}

    def test_dispatch_by_role(self, db, admin_session):
        assert isinstance(build_dashboard(db, admin_session), AdminDashboard)


class TestDashboardEndpoint:
    def test_admin(self, client, admin_headers, make_document):
        make_document()

        response = client.get("/api/v1/dashboard", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "admin"
        assert data["stats"]["pending_reviews"] == 1

    def test_employee(self, client, employee_1):
        response = client.get("/api/v1/dashboard", headers=headers_for(employee_1))

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "employee"
        assert data["stats"]["assigned_documents"] == 0
        assert data["recent_alerts"] == []

    def test_anonymous(self, client):
        response = client.get("/api/v1/dashboard")

        assert response.status_code == 401


class TestAlerts:
    def test_admin_broadcasts_alert(self, client, admin_headers, employee_1):
        response = client.post(
            "/api/v1/alerts",
            json={"title": "Line 1 delay", "description": "Signal fault at Aluva", "level": "high"},
            headers=admin_headers,
        )
        assert response.status_code == 201

        response = client.get("/api/v1/alerts", headers=headers_for(employee_1))
        assert [a["title"] for a in response.json()] == ["Line 1 delay"]

        dashboard = client.get("/api/v1/dashboard", headers=headers_for(employee_1)).json()
        assert dashboard["stats"]["alerts"] == 1
        assert dashboard["recent_alerts"][0]["level"] == "high"

    def test_employee_cannot_broadcast(self, client, employee_1):
        response = client.post(
            "/api/v1/alerts",
            json={"title": "Hello", "description": "World"},
            headers=headers_for(employee_1),
        )

        assert response.status_code == 403

    def test_unknown_level(self, client, admin_headers):
        response = client.post(
            "/api/v1/alerts",
            json={"title": "Hello", "description": "World", "level": "critical"},
            headers=admin_headers,
        )

        assert response.status_code == 422
