"""
Tests for Dose Logs API
=======================

Tests dose logging, ownership checks and log listing.
"""

import pytest
from datetime import datetime, timedelta
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from models import DoseLog, Medicine, User
from timeutils import local_now


class TestLogDose:
    """Tests for recording doses"""

    @pytest.mark.api
    def test_log_dose_defaults(self, client: TestClient, auth_headers, test_medicine: Medicine):
        before = local_now().replace(microsecond=0)

        response = client.post("/api/logs", json={"medicine_id": test_medicine.id}, headers=auth_headers)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["medicine_id"] == test_medicine.id
        assert data["status"] == "taken"
        assert datetime.fromisoformat(data["taken_at"]) >= before

    @pytest.mark.api
    def test_log_dose_with_time_and_status(self, client: TestClient, auth_headers, test_medicine: Medicine):
        response = client.post(
            "/api/logs",
            json={"medicine_id": test_medicine.id, "taken_at": "2024-03-04T08:05:00", "status": "skipped"},
            headers=auth_headers
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["taken_at"] == "2024-03-04T08:05:00"
        assert response.json()["status"] == "skipped"

    @pytest.mark.api
    def test_log_dose_aware_time_is_converted(self, client: TestClient, auth_headers, test_medicine: Medicine):
        response = client.post(
            "/api/logs",
            json={"medicine_id": test_medicine.id, "taken_at": "2024-03-04T08:05:00+00:00"},
            headers=auth_headers
        )

        assert response.status_code == status.HTTP_201_CREATED
        # stored in the configured zone (UTC in tests), without an offset
        assert response.json()["taken_at"] == "2024-03-04T08:05:00"

    @pytest.mark.api
    def test_log_dose_invalid_status(self, client: TestClient, auth_headers, test_medicine: Medicine):
        response = client.post(
            "/api/logs",
            json={"medicine_id": test_medicine.id, "status": "maybe"},
            headers=auth_headers
        )

        assert response.status_code == 422

    @pytest.mark.api
    def test_log_dose_for_other_users_medicine(
        self, client: TestClient, auth_headers, other_medicine: Medicine, db_session: Session
    ):
        response = client.post("/api/logs", json={"medicine_id": other_medicine.id}, headers=auth_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert db_session.query(DoseLog).count() == 0

    @pytest.mark.api
    def test_duplicate_posts_are_both_stored(
        self, client: TestClient, auth_headers, test_medicine: Medicine, db_session: Session
    ):
        payload = {"medicine_id": test_medicine.id, "taken_at": "2024-03-04T08:05:00"}

        client.post("/api/logs", json=payload, headers=auth_headers)
        client.post("/api/logs", json=payload, headers=auth_headers)

        assert db_session.query(DoseLog).count() == 2


class TestListLogs:
    """Tests for listing doses"""

    @pytest.mark.api
    def test_list_newest_first_with_names(self, client: TestClient, auth_headers, test_medicine: Medicine):
        for taken_at in ("2024-03-02T08:00:00", "2024-03-04T08:00:00", "2024-03-03T08:00:00"):
            client.post(
                "/api/logs",
                json={"medicine_id": test_medicine.id, "taken_at": taken_at},
                headers=auth_headers
            )

        response = client.get("/api/logs", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [log["taken_at"][:10] for log in data] == ["2024-03-04", "2024-03-03", "2024-03-02"]
        assert all(log["medicine_name"] == "Lisinopril" for log in data)

    @pytest.mark.api
    def test_list_excludes_other_users(
        self, client: TestClient, auth_headers, other_headers, test_medicine: Medicine, other_medicine: Medicine
    ):
        client.post("/api/logs", json={"medicine_id": other_medicine.id}, headers=other_headers)

        response = client.get("/api/logs", headers=auth_headers)

        assert response.json() == []

    @pytest.mark.api
    def test_unresolvable_medicine_name_is_unknown(
        self, client: TestClient, auth_headers, test_user: User, other_medicine: Medicine, db_session: Session
    ):
        db_session.add(DoseLog(
            user_id=test_user.id,
            medicine_id=other_medicine.id,
            taken_at=datetime(2024, 3, 4, 8, 0),
            status="taken"
        ))
        db_session.commit()

        response = client.get("/api/logs", headers=auth_headers)

        assert response.json()[0]["medicine_name"] == "Unknown"
