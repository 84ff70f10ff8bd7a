"""
Tests for Medications API
=========================

Tests medication course CRUD and today's intake schedule endpoints.
"""

import pytest
from datetime import timedelta
from fastapi import status
from fastapi.testclient import TestClient

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from config import StoreKeys
from tests.conftest import TODAY


# ==================== FIXTURES ====================

@pytest.fixture
def medication_create_data():
    """Sample data for creating a course active today only"""
    return {
        "name": "Metformin",
        "start_date": str(TODAY),
        "end_date": str(TODAY),
        "intake_times": ["08:00"],
        "notes": "With breakfast",
        "patient_full_name": "Awa Traoré"
    }


@pytest.fixture
def created_medication(client: TestClient, medication_create_data):
    response = client.post("/api/v1/medications/", json=medication_create_data)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


# ==================== CREATE TESTS ====================

class TestCreateMedication:
    """Tests for medication creation endpoint"""

    @pytest.mark.api
    def test_create_medication_success(self, client: TestClient, medication_create_data):
        """Test successful medication creation"""
        response = client.post("/api/v1/medications/", json=medication_create_data)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["name"] == "Metformin"
        assert data["start_date"] == str(TODAY)
        assert data["intake_times"] == ["08:00"]
        assert len(data["id"]) == 8

    @pytest.mark.api
    def test_create_medication_invalid_time(self, client: TestClient, medication_create_data):
        medication_create_data["intake_times"] = ["8am"]

        response = client.post("/api/v1/medications/", json=medication_create_data)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.api
    def test_create_medication_no_times(self, client: TestClient, medication_create_data):
        medication_create_data["intake_times"] = []

        response = client.post("/api/v1/medications/", json=medication_create_data)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.api
    def test_create_medication_end_before_start(self, client: TestClient, medication_create_data):
        medication_create_data["end_date"] = str(TODAY - timedelta(days=1))

        response = client.post("/api/v1/medications/", json=medication_create_data)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.api
    def test_create_resets_notified_set(self, client: TestClient, medication_create_data):
        from app import app
        app.state.reminder_session.medication_notified.add("old-08:00")

        client.post("/api/v1/medications/", json=medication_create_data)

        assert app.state.reminder_session.medication_notified == set()


# ==================== READ TESTS ====================

class TestGetMedications:
    """Tests for medication retrieval endpoints"""

    @pytest.mark.api
    def test_list_medications(self, seeded_client: TestClient):
        response = seeded_client.get("/api/v1/medications/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 3
        assert data["active_today"] == 2

    @pytest.mark.api
    def test_list_empty(self, client: TestClient):
        response = client.get("/api/v1/medications/")

        assert response.json() == {"medications": [], "total": 0, "active_today": 0}

    @pytest.mark.api
    def test_get_medication(self, client: TestClient, created_medication):
        response = client.get(f"/api/v1/medications/{created_medication['id']}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["patient_full_name"] == "Awa Traoré"

    @pytest.mark.api
    def test_get_medication_not_found(self, client: TestClient):
        response = client.get("/api/v1/medications/missing")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] is True


# ==================== TODAY TESTS ====================

class TestTodaysIntakes:
    """Tests for today's schedule endpoints"""

    @pytest.mark.api
    def test_todays_intakes(self, seeded_client: TestClient):
        response = seeded_client.get("/api/v1/medications/today")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["date"] == str(TODAY)
        assert [i["intake_time"] for i in data["intakes"]] == ["07:45", "08:00", "20:00"]
        assert [i["urgency_status"] for i in data["intakes"]] == [
            "due_now", "upcoming_soon", "upcoming_later"
        ]
        assert data["time_slots"] == {
            "07:45": ["Lisinopril"],
            "08:00": ["Metformin"],
            "20:00": ["Metformin"],
        }

    @pytest.mark.api
    def test_actionable_flags(self, seeded_client: TestClient):
        intakes = seeded_client.get("/api/v1/medications/today").json()["intakes"]

        assert [i["actionable"] for i in intakes] == [True, False, False]
        assert all(i["logged_outcome"] is None for i in intakes)

    @pytest.mark.api
    def test_follows_clock(self, seeded_client: TestClient, fixed_clock):
        fixed_clock.advance(minutes=30)  # 08:20

        intakes = seeded_client.get("/api/v1/medications/today").json()["intakes"]

        assert [i["urgency_status"] for i in intakes] == ["past_today", "past_today", "upcoming_later"]

    @pytest.mark.api
    def test_next_intake(self, seeded_client: TestClient):
        data = seeded_client.get("/api/v1/medications/next").json()

        assert data["intake"]["medication_name"] == "Metformin"
        assert data["intake"]["minutes_until"] == 10

    @pytest.mark.api
    def test_no_next_intake(self, client: TestClient):
        assert client.get("/api/v1/medications/next").json() == {"intake": None}


# ==================== UPDATE / DELETE TESTS ====================

class TestUpdateMedication:
    """Tests for medication update and delete endpoints"""

    @pytest.mark.api
    def test_update_times(self, client: TestClient, created_medication):
        response = client.put(
            f"/api/v1/medications/{created_medication['id']}",
            json={"intake_times": ["09:00", "21:00"]}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["intake_times"] == ["09:00", "21:00"]
        assert data["name"] == "Metformin"

    @pytest.mark.api
    def test_update_end_before_existing_start(self, client: TestClient, created_medication):
        response = client.put(
            f"/api/v1/medications/{created_medication['id']}",
            json={"end_date": str(TODAY - timedelta(days=3))}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.api
    def test_update_not_found(self, client: TestClient):
        response = client.put("/api/v1/medications/missing", json={"name": "X"})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.api
    def test_delete_medication(self, client: TestClient, created_medication):
        response = client.delete(f"/api/v1/medications/{created_medication['id']}")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert client.get(f"/api/v1/medications/{created_medication['id']}").status_code == 404

    @pytest.mark.api
    def test_delete_not_found(self, client: TestClient):
        assert client.delete("/api/v1/medications/missing").status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.api
    def test_update_clears_notes(self, client: TestClient, created_medication):
        response = client.put(f"/api/v1/medications/{created_medication['id']}", json={"notes": None})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["notes"] is None
        assert response.json()["intake_times"] == ["08:00"]

    @pytest.mark.api
    def test_update_null_name_rejected(self, client: TestClient, created_medication):
        response = client.put(f"/api/v1/medications/{created_medication['id']}", json={"name": None})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# ==================== MALFORMED STORE TESTS ====================

class TestMalformedStoredCourses:
    """Stored records with wrong value types never break the endpoints"""

    @pytest.fixture
    def malformed_client(self, client: TestClient, sql_store, single_course):
        sql_store.set(StoreKeys.MEDICATIONS, [
            {"id": "bad", "name": "Broken", "startDate": 20240610, "intakeTimes": [800]},
            single_course.to_dict(),
        ])
        return client

    @pytest.mark.api
    def test_list_medications(self, malformed_client: TestClient):
        response = malformed_client.get("/api/v1/medications/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 2
        assert data["active_today"] == 1
        broken = data["medications"][0]
        assert broken["start_date"] is None
        assert broken["intake_times"] == []

    @pytest.mark.api
    def test_get_and_today(self, malformed_client: TestClient):
        assert malformed_client.get("/api/v1/medications/bad").status_code == status.HTTP_200_OK

        intakes = malformed_client.get("/api/v1/medications/today").json()["intakes"]
        assert [i["medication_id"] for i in intakes] == ["med-1"]
