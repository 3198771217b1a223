"""
Organization API Tests
"""
from bookflow.models import User


class TestMyOrganization:

    def test_requires_token(self, test_client, organization):
        response = test_client.get("/api/v1/organizations/me")
        assert response.status_code in (401, 403)
        assert response.json()["success"] is False

    def test_invalid_token(self, test_client, organization):
        response = test_client.get(
            "/api/v1/organizations/me", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    def test_get(self, test_client, auth_headers, organization):
        """
        Test: Fetch own organization
        Expected: Snapshot with plan-derived limits
        """
        response = test_client.get("/api/v1/organizations/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == organization.id
        assert data["subscription"]["plan"] == "basic"
        assert data["subscription"]["limits"] == {
            "maxResources": 5, "maxAppointmentsPerMonth": 1000, "maxUsers": 2
        }


class TestSettingsUpdate:

    def test_partial_update(self, test_client, auth_headers, organization):
        response = test_client.put("/api/v1/organizations/me/settings", headers=auth_headers, json={
            "name": "Salon Bella Centro",
            "appointmentSystem": {"bufferBetweenAppointments": 0, "maxAdvanceBookingDays": 60},
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Salon Bella Centro"
        assert data["settings"]["appointmentSystem"]["bufferBetweenAppointments"] == 0
        assert data["settings"]["timezone"] == "UTC"
        assert [s["id"] for s in data["settings"]["services"]] == ["svc-cut", "svc-old"]

    def test_new_services_get_ids(self, test_client, auth_headers, organization):
        response = test_client.put("/api/v1/organizations/me/settings", headers=auth_headers, json={
            "services": [{"name": "Manicure", "duration": 45, "price": 9000}],
        })
        service = response.json()["data"]["settings"]["services"][0]
        assert service["id"].startswith("svc-")

    def test_invalid_hours(self, test_client, auth_headers, organization):
        """
        Test: Monday opening after closing
        Expected: 400 VALIDATION_ERROR, settings untouched
        """
        response = test_client.put("/api/v1/organizations/me/settings", headers=auth_headers, json={
            "businessHours": {"monday": {"isOpen": True, "openTime": "18:00", "closeTime": "09:00"}},
        })

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert organization.settings["businessHours"]["monday"]["openTime"] == "09:00"

    def test_invalid_timezone(self, test_client, auth_headers, organization):
        response = test_client.put(
            "/api/v1/organizations/me/settings", headers=auth_headers, json={"timezone": "Mars/Base"}
        )
        assert response.status_code == 400

    def test_limits_not_editable(self, test_client, auth_headers, organization):
        response = test_client.put("/api/v1/organizations/me/settings", headers=auth_headers, json={
            "subscription": {"limits": {"maxResources": 99}},
        })
        assert response.status_code == 400

    def test_staff_forbidden(self, test_client, db_session, organization, token_headers):
        staff = User(email="staff@salonbella.cl", role="staff", organization_id=organization.id)
        db_session.add(staff)
        db_session.commit()

        response = test_client.put(
            "/api/v1/organizations/me/settings", headers=token_headers(staff), json={"name": "X"}
        )
        assert response.status_code == 403


class TestResources:

    def test_list(self, test_client, auth_headers, professionals):
        response = test_client.get("/api/v1/organizations/me/resources", headers=auth_headers)
        assert len(response.json()["data"]) == 2

    def test_create(self, test_client, auth_headers, professionals):
        response = test_client.post(
            "/api/v1/organizations/me/resources", headers=auth_headers,
            json={"name": "Hyperbaric chamber 1", "kind": "resource"},
        )

        assert response.status_code == 201
        assert response.json()["data"]["kind"] == "resource"

    def test_quota(self, test_client, db_session, auth_headers, organization, professionals):
        """
        Test: Free plan (1 resource) that already has 2
        Expected: 403 QUOTA_EXCEEDED
        """
        organization.plan = "free"
        db_session.commit()

        response = test_client.post(
            "/api/v1/organizations/me/resources", headers=auth_headers, json={"name": "Marta"}
        )
        assert response.status_code == 403
        assert response.json()["error"] == "QUOTA_EXCEEDED"


class TestArchive:

    def test_archive(self, test_client, auth_headers, organization):
        response = test_client.post("/api/v1/organizations/me/archive", headers=auth_headers)
        assert response.status_code == 200

        assert test_client.get("/api/v1/organizations/me", headers=auth_headers).status_code == 404
        assert test_client.get(f"/api/v1/public/organization/{organization.id}").status_code == 404
