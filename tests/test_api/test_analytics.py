"""
Tests for Analytics API
=======================

Tests the daily series, summary and behavior analysis endpoints.
"""

import pytest
from datetime import timedelta
from fastapi import status
from fastapi.testclient import TestClient

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from models import Medicine
from timeutils import local_now


def _log(client, headers, medicine_id, taken_at, status_value="taken"):
    response = client.post(
        "/api/logs",
        json={"medicine_id": medicine_id, "taken_at": taken_at, "status": status_value},
        headers=headers
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


class TestAdherenceScenario:
    """Signup, add a medicine, log a dose, read it back"""

    @pytest.mark.api
    @pytest.mark.integration
    def test_signup_medicine_log_analytics(self, client: TestClient):
        token = client.post("/api/auth/signup", json={
            "email": "flow@example.com",
            "password": "password123",
            "name": "Flow"
        }).json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        medicine = client.post("/api/medicines", json={
            "name": "Lisinopril",
            "dosage": "10mg",
            "frequency": "Daily",
            "reminder_time": "08:00"
        }, headers=headers).json()

        _log(client, headers, medicine["id"], "2024-03-04T08:05:00")

        analytics = client.get("/api/analytics", headers=headers).json()
        assert analytics == [{"date": "2024-03-04", "total": 1, "taken": 1}]

        logs = client.get("/api/logs", headers=headers).json()
        assert len(logs) == 1
        assert logs[0]["medicine_name"] == "Lisinopril"

        behavior = client.get("/api/behavior-analysis", headers=headers).json()
        assert behavior["delays"] == [
            {"medicine_id": medicine["id"], "name": "Lisinopril", "delay": 5.0}
        ]
        # 2024-03-04 was a Monday
        assert behavior["day_of_week_stats"] == [{"day_index": 1, "total": 1, "taken": 1}]


class TestDailySeries:
    """Tests for GET /analytics"""

    @pytest.mark.api
    def test_series_groups_and_sorts(self, client: TestClient, auth_headers, test_medicine: Medicine):
        _log(client, auth_headers, test_medicine.id, "2024-03-05T08:00:00", "missed")
        _log(client, auth_headers, test_medicine.id, "2024-03-04T08:00:00")
        _log(client, auth_headers, test_medicine.id, "2024-03-04T20:00:00", "skipped")

        response = client.get("/api/analytics", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == [
            {"date": "2024-03-04", "total": 2, "taken": 1},
            {"date": "2024-03-05", "total": 1, "taken": 0},
        ]

    @pytest.mark.api
    def test_days_window(self, client: TestClient, auth_headers, test_medicine: Medicine):
        today = local_now().replace(hour=8, minute=0, second=0, microsecond=0)
        _log(client, auth_headers, test_medicine.id, today.isoformat())
        _log(client, auth_headers, test_medicine.id, (today - timedelta(days=10)).isoformat())

        response = client.get("/api/analytics", params={"days": 3}, headers=auth_headers)

        assert [day["date"] for day in response.json()] == [today.date().isoformat()]

    @pytest.mark.api
    def test_requires_auth(self, client: TestClient):
        assert client.get("/api/analytics").status_code == status.HTTP_401_UNAUTHORIZED


class TestSummary:
    """Tests for GET /analytics/summary"""

    @pytest.mark.api
    def test_summary_empty(self, client: TestClient, auth_headers):
        response = client.get("/api/analytics/summary", headers=auth_headers)

        assert response.json() == {"streak": 0, "missed_last_7": 0, "best_day": "N/A"}

    @pytest.mark.api
    def test_summary_streak(self, client: TestClient, auth_headers, test_medicine: Medicine):
        _log(client, auth_headers, test_medicine.id, "2024-03-01T08:00:00", "missed")
        for day in ("02", "03", "04"):
            _log(client, auth_headers, test_medicine.id, f"2024-03-{day}T08:00:00")

        data = client.get("/api/analytics/summary", headers=auth_headers).json()

        assert data["streak"] == 3
        assert data["missed_last_7"] == 1
        # Saturday 2024-03-02 is the first day seen with a full ratio
        assert data["best_day"] == "Saturday"


class TestBehaviorAnalysis:
    """Tests for GET /behavior-analysis"""

    @pytest.mark.api
    def test_includes_medicines_without_logs(self, client: TestClient, auth_headers, test_medicine: Medicine):
        response = client.get("/api/behavior-analysis", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["medicine_stats"] == [
            {"medicine_id": test_medicine.id, "name": "Lisinopril", "total": 0, "taken": 0}
        ]
        assert data["day_of_week_stats"] == []
        assert data["delays"] == []

    @pytest.mark.api
    def test_delays_only_for_taken_doses(self, client: TestClient, auth_headers, test_medicine: Medicine):
        _log(client, auth_headers, test_medicine.id, "2024-03-04T08:15:00")
        _log(client, auth_headers, test_medicine.id, "2024-03-05T07:50:00")
        _log(client, auth_headers, test_medicine.id, "2024-03-06T09:00:00", "missed")

        data = client.get("/api/behavior-analysis", headers=auth_headers).json()

        assert [d["delay"] for d in data["delays"]] == [15.0, -10.0]
        assert data["medicine_stats"][0]["total"] == 3
        assert data["medicine_stats"][0]["taken"] == 2
