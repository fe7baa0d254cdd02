"""
Tests for MedTrack API Client
=============================

Tests warm-up retries, error mapping and typed responses using
httpx.MockTransport, plus one pass against the real application.
"""

import json
from datetime import datetime
import pytest
import httpx
from sqlalchemy.orm import Session

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from app import app
from database import get_db
from client.api_client import MedTrackClient
from client.errors import (
    ApiError,
    AssistantError,
    AuthenticationError,
    BackendUnavailableError,
    NotFoundError,
    RequestValidationError,
)


USER = {"id": 1, "email": "test.user@example.com", "name": "Test User"}
MEDICINE = {
    "id": 4,
    "user_id": 1,
    "name": "Lisinopril",
    "dosage": "10mg",
    "frequency": "Daily",
    "reminder_time": "08:00",
}


class Recorder:
    """Sequence of canned responses; records every request"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_client(sleeps):
    async def record_sleep(seconds):
        sleeps.append(seconds)

    def factory(recorder, **kwargs):
        kwargs.setdefault("retry_attempts", 3)
        kwargs.setdefault("retry_delay", 4.0)
        return MedTrackClient(
            "http://testserver",
            transport=httpx.MockTransport(recorder),
            sleep=record_sleep,
            **kwargs
        )

    return factory


class TestRetries:

    @pytest.mark.client
    @pytest.mark.asyncio
    async def test_retries_connection_errors(self, make_client, sleeps):
        recorder = Recorder(
            httpx.ConnectError("refused"),
            httpx.Response(200, json=[MEDICINE]),
        )

        async with make_client(recorder, token="abc") as client:
            medicines = await client.list_medicines()

        assert medicines[0].name == "Lisinopril"
        assert len(recorder.requests) == 2
        assert sleeps == [4.0]
        assert recorder.requests[-1].url.path == "/api/medicines"
        assert recorder.requests[-1].headers["Authorization"] == "Bearer abc"

    @pytest.mark.client
    @pytest.mark.asyncio
    async def test_retries_warming_up_responses(self, make_client, sleeps):
        recorder = Recorder(
            httpx.Response(503, text="Service Unavailable"),
            httpx.Response(200, text="<html>starting</html>"),
            httpx.Response(200, json=USER),
        )

        async with make_client(recorder) as client:
            user = await client.me()

        assert user.email == USER["email"]
        assert len(recorder.requests) == 3
        assert sleeps == [4.0, 4.0]

    @pytest.mark.client
    @pytest.mark.asyncio
    async def test_gives_up(self, make_client, sleeps):
        recorder = Recorder(httpx.ConnectError("refused"))

        async with make_client(recorder, retry_attempts=5) as client:
            with pytest.raises(BackendUnavailableError) as exc_info:
                await client.health()

        assert len(recorder.requests) == 5
        assert len(sleeps) == 4
        assert "5 attempts" in exc_info.value.message

    @pytest.mark.client
    @pytest.mark.asyncio
    async def test_json_503_is_not_retried(self, make_client, sleeps):
        recorder = Recorder(httpx.Response(
            503,
            json={"error": "Database Connection Error", "message": "The database is down"}
        ))

        async with make_client(recorder) as client:
            with pytest.raises(BackendUnavailableError) as exc_info:
                await client.list_logs()

        assert len(recorder.requests) == 1
        assert sleeps == []
        assert exc_info.value.message == "The database is down"
        assert exc_info.value.payload["error"] == "Database Connection Error"


class TestErrorMapping:

    @pytest.mark.client
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code,error_class", [
        (400, RequestValidationError),
        (401, AuthenticationError),
        (403, AuthenticationError),
        (404, NotFoundError),
        (422, RequestValidationError),
        (502, AssistantError),
        (500, ApiError),
    ])
    async def test_status_mapping(self, make_client, status_code, error_class):
        recorder = Recorder(httpx.Response(status_code, json={"message": "nope", "status_code": status_code}))

        async with make_client(recorder) as client:
            with pytest.raises(error_class) as exc_info:
                await client.get_medicine(4)

        assert exc_info.value.status_code == status_code
        assert exc_info.value.message == "nope"

    @pytest.mark.client
    @pytest.mark.asyncio
    async def test_unexpected_shape_is_api_error(self, make_client):
        recorder = Recorder(
            httpx.Response(200, json={"unexpected": True}),
            httpx.Response(200, json={"medicines": []}),
            httpx.Response(200, json={"answer": "hi"}),
        )

        async with make_client(recorder) as client:
            with pytest.raises(ApiError):
                await client.me()
            with pytest.raises(ApiError):
                await client.list_medicines()
            with pytest.raises(ApiError):
                await client.chat("Hello")


class TestTypedCalls:

    @pytest.mark.client
    @pytest.mark.asyncio
    async def test_login_stores_token(self, make_client):
        recorder = Recorder(
            httpx.Response(200, json={"token": "tok-1", "user": USER}),
            httpx.Response(200, json=USER),
        )

        async with make_client(recorder) as client:
            auth = await client.login(USER["email"], "s3cret-pass")
            await client.me()

        assert auth.token == "tok-1"
        assert client.token == "tok-1"
        assert "Authorization" not in recorder.requests[0].headers
        assert recorder.requests[1].headers["Authorization"] == "Bearer tok-1"

    @pytest.mark.client
    @pytest.mark.asyncio
    async def test_create_medicine_payload(self, make_client):
        recorder = Recorder(httpx.Response(201, json=MEDICINE))

        async with make_client(recorder) as client:
            await client.create_medicine({
                "name": "Lisinopril",
                "dosage": "10mg",
                "frequency": "Daily",
                "reminder_time": "08:00",
            })

        body = json.loads(recorder.requests[0].content)
        assert body == {
            "name": "Lisinopril",
            "dosage": "10mg",
            "frequency": "Daily",
            "reminder_time": "08:00",
        }

    @pytest.mark.client
    @pytest.mark.asyncio
    async def test_update_sends_only_set_fields(self, make_client):
        recorder = Recorder(httpx.Response(200, json={**MEDICINE, "reminder_time": None}))

        async with make_client(recorder) as client:
            medicine = await client.update_medicine(4, {"reminder_time": None})

        assert json.loads(recorder.requests[0].content) == {"reminder_time": None}
        assert medicine.reminder_time is None

    @pytest.mark.client
    @pytest.mark.asyncio
    async def test_snooze(self, make_client):
        recorder = Recorder(httpx.Response(200, json={"success": True, "snoozed_until": "2024-03-04T08:15:00"}))

        async with make_client(recorder) as client:
            result = await client.snooze_medicine(4)

        assert json.loads(recorder.requests[0].content) == {"minutes": 15}
        assert result.snoozed_until.minute == 15

    @pytest.mark.client
    @pytest.mark.asyncio
    async def test_analytics_days_param(self, make_client):
        recorder = Recorder(httpx.Response(200, json=[{"date": "2024-03-04", "total": 2, "taken": 1}]))

        async with make_client(recorder) as client:
            series = await client.analytics(days=7)

        assert recorder.requests[0].url.params["days"] == "7"
        assert series[0].taken == 1


class TestAgainstApplication:
    """Client driven through the ASGI app"""

    @pytest.mark.client
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_signup_to_analytics(self, db_session: Session):
        def override_get_db():
            yield db_session

        app.dependency_overrides[get_db] = override_get_db
        try:
            client = MedTrackClient(
                "http://testserver",
                transport=httpx.ASGITransport(app=app),
                retry_attempts=1
            )
            async with client:
                await client.signup("flow@example.com", "s3cret-pass", "Flow")
                medicine = await client.create_medicine({
                    "name": "Lisinopril",
                    "dosage": "10mg",
                    "frequency": "Daily",
                    "reminder_time": "08:00",
                })
                await client.log_dose(medicine.id, taken_at=datetime(2024, 3, 4, 8, 5))
                series = await client.analytics()
                logs = await client.list_logs()

                with pytest.raises(NotFoundError):
                    await client.get_medicine(medicine.id + 100)
        finally:
            app.dependency_overrides.clear()

        assert [(d.date, d.total, d.taken) for d in series] == [("2024-03-04", 1, 1)]
        assert logs[0].medicine_name == "Lisinopril"
