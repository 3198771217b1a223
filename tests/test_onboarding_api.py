"""
Onboarding API Tests
Step-by-step setup ending with a configured organization
"""
from bookflow.models import User

STEPS = {
    1: {"stepName": "industry_selection", "industryType": "hyperbaric_center"},
    2: {
        "stepName": "organization_setup",
        "businessName": "Clínica Sur",
        "timezone": "America/Santiago",
        "currency": "CLP",
    },
    3: {
        "stepName": "business_configuration",
        "appointmentModel": "resource_based",
        "allowClientSelection": False,
        "bufferBetweenAppointments": 0,
        "maxAdvanceBookingDays": 14,
        "services": [{"name": "Sesión hiperbárica", "duration": 90, "price": 40000}],
    },
    4: {"stepName": "plan_selection", "planId": "basic"},
}


def submit(test_client, headers, number, data=None):
    return test_client.put("/api/v1/onboarding/step", headers=headers, json={
        "stepNumber": number, "stepData": data or STEPS[number],
    })


class TestOnboardingFlow:

    def test_initial_status(self, test_client, new_user_headers):
        response = test_client.get("/api/v1/onboarding/status", headers=new_user_headers)

        assert response.status_code == 200
        assert response.json()["data"]["currentStep"] == 1
        assert response.json()["data"]["isCompleted"] is False

    def test_first_step(self, test_client, new_user_headers):
        response = submit(test_client, new_user_headers, 1)

        assert response.status_code == 200
        assert response.json()["data"]["currentStep"] == 2
        assert response.json()["data"]["industry"] == "hyperbaric_center"

    def test_skip_rejected(self, test_client, new_user_headers):
        """
        Test: Submit step 3 while at step 2
        Expected: 400 VALIDATION_ERROR with the current step
        """
        submit(test_client, new_user_headers, 1)
        response = submit(test_client, new_user_headers, 3)

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert response.json()["data"]["currentStep"] == 2

    def test_untagged_step_data(self, test_client, new_user_headers):
        response = submit(test_client, new_user_headers, 1, {"industryType": "beauty_salon"})
        assert response.status_code == 200

    def test_wrong_payload_for_step(self, test_client, new_user_headers):
        response = submit(test_client, new_user_headers, 1, STEPS[4])
        assert response.status_code == 400

    def test_complete_creates_organization(self, test_client, new_user_headers):
        """
        Test: Walk all four steps as a user without organization
        Expected: Onboarding completed, organization created with the answers
        """
        for number in range(1, 5):
            response = submit(test_client, new_user_headers, number)
            assert response.status_code == 200

        status = response.json()["data"]
        assert status["isCompleted"] is True
        assert status["currentStep"] == 5

        organization = test_client.get("/api/v1/organizations/me", headers=new_user_headers).json()["data"]
        assert organization["name"] == "Clínica Sur"
        assert organization["templateType"] == "hyperbaric_center"
        assert organization["settings"]["timezone"] == "America/Santiago"
        assert organization["settings"]["appointmentSystem"]["maxAdvanceBookingDays"] == 14
        assert organization["settings"]["services"][0]["id"] == "svc-1"
        assert organization["subscription"]["plan"] == "basic"
        assert organization["subscription"]["trial"]["daysTotal"] == 30

    def test_completed_is_terminal(self, test_client, new_user_headers):
        for number in range(1, 5):
            submit(test_client, new_user_headers, number)

        identical = submit(test_client, new_user_headers, 4)
        changed = submit(test_client, new_user_headers, 4, {"stepName": "plan_selection", "planId": "premium"})

        assert identical.status_code == 200
        assert changed.status_code == 400

    def test_invalid_business_hours_keep_step_open(self, test_client, new_user_headers):
        """
        Test: Step 2 with Monday closing before it opens, then corrected
        Expected: 400 VALIDATION_ERROR and step 2 still open, corrected hours accepted
        """
        submit(test_client, new_user_headers, 1)
        inverted = dict(STEPS[2], businessHours={"monday": {"isOpen": True, "openTime": "18:00", "closeTime": "09:00"}})

        response = submit(test_client, new_user_headers, 2, inverted)

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
        status = test_client.get("/api/v1/onboarding/status", headers=new_user_headers).json()["data"]
        assert status["currentStep"] == 2
        assert [step["stepNumber"] for step in status["completedSteps"]] == [1]

        corrected = dict(STEPS[2], businessHours={"monday": {"isOpen": True, "openTime": "09:00", "closeTime": "18:00"}})
        assert submit(test_client, new_user_headers, 2, corrected).status_code == 200
        for number in (3, 4):
            assert submit(test_client, new_user_headers, number).status_code == 200

        organization = test_client.get("/api/v1/organizations/me", headers=new_user_headers).json()["data"]
        assert organization["settings"]["businessHours"]["monday"]["openTime"] == "09:00"


class TestResetAndSync:

    def test_reset(self, test_client, new_user_headers):
        submit(test_client, new_user_headers, 1)

        response = test_client.post("/api/v1/onboarding/reset", headers=new_user_headers)

        assert response.status_code == 200
        assert response.json()["data"]["currentStep"] == 1
        assert response.json()["data"]["completedSteps"] == []

    def test_reset_requires_owner(self, test_client, db_session, organization, token_headers):
        staff = User(email="staff@salonbella.cl", role="staff", organization_id=organization.id)
        db_session.add(staff)
        db_session.commit()

        response = test_client.post("/api/v1/onboarding/reset", headers=token_headers(staff))
        assert response.status_code == 403

    def test_sync_without_steps(self, test_client, new_user_headers):
        response = test_client.post("/api/v1/onboarding/sync", headers=new_user_headers)
        assert response.status_code == 400

    def test_sync_existing_organization(self, test_client, db_session, owner, auth_headers, organization):
        """
        Test: Owner of an existing organization re-syncs after step 2
        Expected: Organization renamed, plan untouched
        """
        owner.onboarding_status = None
        db_session.commit()
        submit(test_client, auth_headers, 1)
        submit(test_client, auth_headers, 2)

        response = test_client.post("/api/v1/onboarding/sync", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == organization.id
        assert data["name"] == "Clínica Sur"
        assert data["subscription"]["plan"] == "basic"

    def test_reset_then_premium_drops_trial(self, test_client, new_user_headers):
        """
        Test: Complete with basic, reset, complete again with premium
        Expected: Organization on premium with no leftover trial
        """
        for number in range(1, 5):
            submit(test_client, new_user_headers, number)
        organization = test_client.get("/api/v1/organizations/me", headers=new_user_headers).json()["data"]
        assert organization["subscription"]["trial"]["daysTotal"] == 30

        test_client.post("/api/v1/onboarding/reset", headers=new_user_headers)
        for number in range(1, 4):
            assert submit(test_client, new_user_headers, number).status_code == 200
        response = submit(test_client, new_user_headers, 4, {"stepName": "plan_selection", "planId": "premium"})
        assert response.status_code == 200

        organization = test_client.get("/api/v1/organizations/me", headers=new_user_headers).json()["data"]
        assert organization["subscription"]["plan"] == "premium"
        assert organization["subscription"]["trial"] is None
