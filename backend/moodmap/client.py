"""
MoodMap Client
==============
Async HTTP client for the MoodMap API, used by scripts and the demo
front end. It holds no state of its own: every call goes to the server
and returns the parsed entity from the response envelope.

Errors:
- MoodMapAPIError      the server answered with {success: false} (400,
                       404, 429). Carries crisis resources when the
                       submission was blocked for crisis keywords.
- MoodMapNetworkError  the server could not be reached. The message is
                       the generic text shown to users; no retry.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import httpx

from moodmap.models.common import CrisisResources, Location
from moodmap.models.mood import MoodEntry
from moodmap.models.notification import PushNotification
from moodmap.models.support import SupportRequest, SupportResponse

DEFAULT_BASE_URL = "http://localhost:3000"

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class MoodMapAPIError(Exception):
    """Non-2xx response from the MoodMap API."""

    def __init__(
        self,
        status_code: int,
        message: str,
        crisis_resources: Optional[CrisisResources] = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.crisis_resources = crisis_resources
        super().__init__(f"MoodMap API error {status_code}: {message}")


class MoodMapNetworkError(Exception):
    """The API could not be reached."""

    def __init__(self) -> None:
        super().__init__(NETWORK_ERROR_MESSAGE)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def _compact(payload: dict[str, Any]) -> dict[str, Any]:
    """Drop unset optional fields so the server applies its own defaults."""
    return {key: value for key, value in payload.items() if value is not None}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class MoodMapClient:
    """Thin wrapper around the MoodMap REST endpoints."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def submit_mood(
        self,
        user_id: str,
        mood: str,
        value: int,
        note: Optional[str] = None,
        has_audio: bool = False,
        timestamp: Optional[datetime] = None,
        location: Optional[Location] = None,
    ) -> MoodEntry:
        data = await self._request(
            "POST",
            "/mood",
            json=_compact({
                "userId": user_id,
                "mood": mood,
                "value": value,
                "note": note,
                "hasAudio": has_audio,
                "timestamp": _iso(timestamp),
                "location": location.model_dump() if location else None,
            }),
        )
        return MoodEntry.model_validate(data["mood"])

    async def get_mood_history(self, user_id: str) -> list[MoodEntry]:
        data = await self._request("GET", "/mood", params={"userId": user_id})
        return [MoodEntry.model_validate(m) for m in data["moods"]]

    async def create_support_request(
        self,
        user_id: str,
        location: Location,
        message: Optional[str] = None,
        privacy_level: Optional[str] = None,
        radius: Optional[float] = None,
    ) -> SupportRequest:
        data = await self._request(
            "POST",
            "/hug-requests",
            json=_compact({
                "userId": user_id,
                "location": location.model_dump(),
                "message": message,
                "privacyLevel": privacy_level,
                "radius": radius,
            }),
        )
        return SupportRequest.model_validate(data["request"])

    async def list_nearby_support_requests(
        self, lat: float, lng: float, radius: Optional[float] = None
    ) -> list[SupportRequest]:
        data = await self._request(
            "GET",
            "/nearby-hug-requests",
            params=_compact({"lat": lat, "lng": lng, "radius": radius}),
        )
        return [SupportRequest.model_validate(r) for r in data["requests"]]

    async def respond_to_support_request(
        self, request_id: str, responder_id: str, response: str
    ) -> SupportResponse:
        data = await self._request(
            "POST",
            "/hug-responses",
            json={"requestId": request_id, "responderId": responder_id, "response": response},
        )
        return SupportResponse.model_validate(data["response"])

    async def send_push_notification(
        self,
        user_id: str,
        message: str,
        title: Optional[str] = None,
        type_: Optional[str] = None,
    ) -> PushNotification:
        data = await self._request(
            "POST",
            "/push/send",
            json=_compact({"userId": user_id, "message": message, "title": title, "type": type_}),
        )
        return PushNotification.model_validate(data["notification"])

    async def list_push_notifications(self, user_id: str) -> tuple[list[PushNotification], int]:
        data = await self._request("GET", "/push/notifications", params={"userId": user_id})
        notifications = [PushNotification.model_validate(n) for n in data["notifications"]]
        return notifications, data["unread"]

    async def report_abuse(
        self,
        reporter_id: str,
        content_id: str,
        content_type: str,
        reason: Optional[str] = None,
    ) -> str:
        data = await self._request(
            "POST",
            "/report-abuse",
            json=_compact({
                "reporterId": reporter_id,
                "contentId": content_id,
                "contentType": content_type,
                "reason": reason,
            }),
        )
        return data["reportId"]

    async def health(self) -> dict:
        return await self._request("GET", "/health")

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Shared call. Raises MoodMapAPIError on non-2xx, MoodMapNetworkError if unreachable."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(method, f"{self._base_url}{path}", **kwargs)
        except httpx.TransportError as exc:
            raise MoodMapNetworkError() from exc

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.is_success:
            resources = body.get("crisisResources") if isinstance(body, dict) else None
            raise MoodMapAPIError(
                response.status_code,
                body.get("message", response.text) if isinstance(body, dict) else response.text,
                CrisisResources.model_validate(resources) if resources else None,
            )
        return body
