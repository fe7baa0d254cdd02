"""
MedTrack API Client
Async HTTP client for the MedTrack REST API with warm-up retry and typed responses
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar, Union
from datetime import datetime

import httpx
from pydantic import BaseModel, ValidationError

from config import settings
from api.schemas.analytics import (
    AdherenceSummaryResponse,
    BehaviorAnalysisResponse,
    DailyStatResponse,
)
from api.schemas.assistant import ParsedMedicineResponse
from api.schemas.dose_log import DoseLogResponse, DoseLogWithName
from api.schemas.medicine import (
    MedicineCreate,
    MedicineDeleteResponse,
    MedicineResponse,
    MedicineUpdate,
    SnoozeResponse,
)
from api.schemas.user import AuthResponse, SettingsUpdateResponse, UserResponse
from client.errors import ApiError, BackendUnavailableError, error_for_status


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _is_json(response: httpx.Response) -> bool:
    return "application/json" in response.headers.get("content-type", "")


def _error_message(response: httpx.Response, payload: Dict[str, Any]) -> str:
    for key in ("message", "detail", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
        if value:
            return str(value)
    return response.reason_phrase or f"HTTP {response.status_code}"


def _unexpected(model_name: str, error: Exception) -> ApiError:
    logger.error("Unexpected %s payload: %s", model_name, error)
    return ApiError(f"Unexpected response from the server ({model_name})")


def _as_model(model: Type[ModelT], data: Any) -> ModelT:
    """Validate a response body; shape mismatches become ApiError"""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise _unexpected(model.__name__, e) from e


def _as_list(model: Type[ModelT], data: Any) -> List[ModelT]:
    if not isinstance(data, list):
        raise ApiError(f"Unexpected response from the server (expected a list of {model.__name__})")
    return [_as_model(model, item) for item in data]


def _field(data: Any, key: str) -> str:
    if not isinstance(data, dict) or not isinstance(data.get(key), str):
        raise ApiError(f"Unexpected response from the server (missing {key})")
    return data[key]


class MedTrackClient:
    """
    Client for the MedTrack API

    Every request is retried on transport errors and on warm-up responses
    (non-JSON 503, or non-JSON 200 on an API path), with a fixed delay.
    Retries are not deduplicated by the server: a dose log re-sent after a
    lost response is stored twice.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        *,
        retry_attempts: int = settings.CLIENT_RETRY_ATTEMPTS,
        retry_delay: float = settings.CLIENT_RETRY_DELAY_SECONDS,
        timeout: float = settings.CLIENT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.token = token
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay
        self.timeout = timeout
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
                transport=self._transport
            )
        return self._client

    async def close(self):
        """Close HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "MedTrackClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # ==================== TRANSPORT ====================

    def _is_warming_up(self, response: httpx.Response, path: str) -> bool:
        if _is_json(response):
            return False
        if response.status_code == 503:
            return True
        return response.status_code == 200 and path.startswith(settings.API_PREFIX)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True
    ) -> Any:
        """
        Send a request to ``API_PREFIX + path`` and return the decoded JSON body

        Raises:
            ClientError subclass matching the response status
        """
        url = f"{settings.API_PREFIX}{path}"
        headers = {}
        if authenticated and self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        client = await self._get_client()
        last_problem = ""

        for attempt in range(1, self.retry_attempts + 1):
            try:
                response = await client.request(method, url, json=json, params=params, headers=headers)
            except httpx.TransportError as e:
                last_problem = f"{type(e).__name__}: {e}"
            else:
                if not self._is_warming_up(response, url):
                    return self._handle_response(response)
                last_problem = f"non-JSON {response.status_code} response"

            if attempt < self.retry_attempts:
                logger.warning(
                    "%s %s failed (%s), retrying in %ss (attempt %d/%d)",
                    method, url, last_problem, self.retry_delay, attempt, self.retry_attempts
                )
                await self._sleep(self.retry_delay)

        logger.error("%s %s gave up after %d attempts: %s", method, url, self.retry_attempts, last_problem)
        raise BackendUnavailableError(
            f"Backend did not respond after {self.retry_attempts} attempts ({last_problem})"
        )

    def _handle_response(self, response: httpx.Response) -> Any:
        payload: Dict[str, Any] = {}
        if _is_json(response):
            try:
                body = response.json()
            except ValueError:
                body = None
            if response.is_success:
                return body
            if isinstance(body, dict):
                payload = body

        if response.is_success:
            return None

        raise error_for_status(response.status_code, _error_message(response, payload), payload)

    # ==================== AUTH & USER ====================

    async def health(self) -> Dict[str, Any]:
        return await self.request("GET", "/health", authenticated=False)

    async def signup(self, email: str, password: str, name: str) -> AuthResponse:
        data = await self.request(
            "POST", "/auth/signup",
            json={"email": email, "password": password, "name": name},
            authenticated=False
        )
        auth = _as_model(AuthResponse, data)
        self.token = auth.token
        return auth

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self.request(
            "POST", "/auth/login",
            json={"email": email, "password": password},
            authenticated=False
        )
        auth = _as_model(AuthResponse, data)
        self.token = auth.token
        return auth

    async def me(self) -> UserResponse:
        return _as_model(UserResponse, await self.request("GET", "/user/me"))

    async def update_settings(self, **updates) -> SettingsUpdateResponse:
        """Send only the given preferences; pass custom_sound_data=None to clear it"""
        data = await self.request("PUT", "/user/settings", json=updates)
        return _as_model(SettingsUpdateResponse, data)

    # ==================== MEDICINES ====================

    async def list_medicines(self) -> List[MedicineResponse]:
        data = await self.request("GET", "/medicines")
        return _as_list(MedicineResponse, data)

    async def get_medicine(self, medicine_id: int) -> MedicineResponse:
        return _as_model(MedicineResponse, await self.request("GET", f"/medicines/{medicine_id}"))

    async def create_medicine(self, medicine: Union[MedicineCreate, Dict[str, Any]]) -> MedicineResponse:
        if isinstance(medicine, dict):
            medicine = MedicineCreate(**medicine)
        data = await self.request("POST", "/medicines", json=medicine.model_dump(mode="json", exclude_none=True))
        return _as_model(MedicineResponse, data)

    async def update_medicine(
        self,
        medicine_id: int,
        updates: Union[MedicineUpdate, Dict[str, Any]]
    ) -> MedicineResponse:
        if isinstance(updates, dict):
            updates = MedicineUpdate(**updates)
        data = await self.request(
            "PUT", f"/medicines/{medicine_id}",
            json=updates.model_dump(mode="json", exclude_unset=True)
        )
        return _as_model(MedicineResponse, data)

    async def delete_medicine(self, medicine_id: int) -> MedicineDeleteResponse:
        data = await self.request("DELETE", f"/medicines/{medicine_id}")
        return _as_model(MedicineDeleteResponse, data)

    async def snooze_medicine(
        self,
        medicine_id: int,
        minutes: int = settings.DEFAULT_SNOOZE_MINUTES
    ) -> SnoozeResponse:
        data = await self.request("POST", f"/medicines/{medicine_id}/snooze", json={"minutes": minutes})
        return _as_model(SnoozeResponse, data)

    # ==================== LOGS & ANALYTICS ====================

    async def list_logs(self) -> List[DoseLogWithName]:
        data = await self.request("GET", "/logs")
        return _as_list(DoseLogWithName, data)

    async def log_dose(
        self,
        medicine_id: int,
        taken_at: Optional[datetime] = None,
        status: str = "taken"
    ) -> DoseLogResponse:
        payload: Dict[str, Any] = {"medicine_id": medicine_id, "status": status}
        if taken_at is not None:
            payload["taken_at"] = taken_at.isoformat()
        return _as_model(DoseLogResponse, await self.request("POST", "/logs", json=payload))

    async def analytics(self, days: Optional[int] = None) -> List[DailyStatResponse]:
        params = {"days": days} if days else None
        data = await self.request("GET", "/analytics", params=params)
        return _as_list(DailyStatResponse, data)

    async def analytics_summary(self, days: Optional[int] = None) -> AdherenceSummaryResponse:
        params = {"days": days} if days else None
        data = await self.request("GET", "/analytics/summary", params=params)
        return _as_model(AdherenceSummaryResponse, data)

    async def behavior_analysis(self, days: Optional[int] = None) -> BehaviorAnalysisResponse:
        params = {"days": days} if days else None
        data = await self.request("GET", "/behavior-analysis", params=params)
        return _as_model(BehaviorAnalysisResponse, data)

    # ==================== ASSISTANT ====================

    async def parse_medicine(self, text: str) -> ParsedMedicineResponse:
        data = await self.request("POST", "/assistant/parse-medicine", json={"text": text})
        return _as_model(ParsedMedicineResponse, data)

    async def chat(
        self,
        message: str,
        history: Optional[List[Dict[str, str]]] = None,
        language: Optional[str] = None
    ) -> str:
        payload: Dict[str, Any] = {"message": message, "history": history or []}
        if language:
            payload["language"] = language
        data = await self.request("POST", "/assistant/chat", json=payload)
        return _field(data, "reply")

    async def insights(self, days: Optional[int] = None) -> str:
        params = {"days": days} if days else None
        data = await self.request("POST", "/assistant/insights", params=params)
        return _field(data, "insights")

    async def translate(self, text: str, target_language: Optional[str]) -> str:
        data = await self.request(
            "POST", "/assistant/translate",
            json={"text": text, "target_language": target_language}
        )
        return _field(data, "text")

    async def medicine_insight(self, medicine_id: int) -> str:
        data = await self.request("POST", f"/assistant/medicine-insights/{medicine_id}")
        return _field(data, "insight")
