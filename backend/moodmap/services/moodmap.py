"""
MoodMap Request Service
=======================
Owns every in-memory collection behind the API and applies the policy
rules around them:

    moods               MoodEntry, append-only
    support_requests    SupportRequest, counter + status mutated on response
    support_responses   SupportResponse, append-only
    notifications       PushNotification, append-only (never marked read)
    reports             AbuseReport, append-only

Policy order for submissions is fixed: required fields → rate limit →
crisis keywords → store. A crisis-blocked submission therefore still
counts against the caller's rate limit.

State is lost on restart. Read-modify-write sequences run under a
single re-entrant lock, so the "responses counter equals number of
recorded responses" invariant holds for direct or threaded callers of
the service.

Time and randomness are injected (clock, rng) so tests can pin both.
"""

from __future__ import annotations

import json
import logging
import random
import threading
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from moodmap.config import Settings, get_settings
from moodmap.models.common import Location
from moodmap.models.mood import MoodEntry, mood_emoji
from moodmap.models.notification import (
    DEFAULT_NOTIFICATION_TITLE,
    DEFAULT_NOTIFICATION_TYPE,
    PushNotification,
)
from moodmap.models.report import AbuseReport
from moodmap.models.support import (
    DEFAULT_PRIVACY_LEVEL,
    DEFAULT_REQUEST_MESSAGE,
    RESPONSE_ACCEPT,
    STATUS_ACTIVE,
    STATUS_MATCHED,
    SupportRequest,
    SupportResponse,
)
from moodmap.services.errors import (
    CrisisDetected,
    Expired,
    NotFound,
    RateLimitExceeded,
    ValidationError,
)
from moodmap.services.geo import haversine_miles, neighborhood_name
from moodmap.services.safety import (
    CRISIS_RESOURCES,
    Clock,
    RateLimiter,
    detect_crisis_keywords,
    utc_now,
)

logger = logging.getLogger(__name__)

MATCH_NOTIFICATION_MESSAGE = "Someone accepted your support request!"

_ACTION_MOOD = "mood"
_ACTION_SUPPORT_REQUEST = "hug-request"


def _ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so client and server timestamps compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def _missing(**fields: object) -> list[str]:
    """Names of fields that are None or empty. Zero is a value, not absence."""
    return [name for name, value in fields.items() if value is None or value == ""]


class MoodMapService:
    """The whole request-handling surface of the MoodMap backend."""

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Clock = utc_now,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self._rate_limiter = RateLimiter(clock)

        self.moods: list[MoodEntry] = []
        self.support_requests: list[SupportRequest] = []
        self.support_responses: list[SupportResponse] = []
        self.notifications: list[PushNotification] = []
        self.reports: list[AbuseReport] = []

    @property
    def _window(self) -> timedelta:
        return timedelta(seconds=self._settings.rate_limit_window_seconds)

    # ------------------------------------------------------------------
    # Mood check-ins
    # ------------------------------------------------------------------

    def submit_mood(
        self,
        user_id: Optional[str],
        mood: Optional[str],
        value: Optional[int],
        note: Optional[str] = None,
        has_audio: Optional[bool] = None,
        timestamp: Optional[datetime] = None,
        location: Optional[Location] = None,
    ) -> MoodEntry:
        missing = _missing(userId=user_id, mood=mood, value=value)
        if missing:
            raise ValidationError.missing(*missing)

        if not self._rate_limiter.check(
            user_id, _ACTION_MOOD, self._settings.mood_checkins_per_window, self._window
        ):
            raise RateLimitExceeded("Rate limit exceeded. Please try again later.")

        if detect_crisis_keywords(note):
            logger.warning("Crisis keywords in mood note from user %s, check-in blocked", user_id)
            raise CrisisDetected(
                "Crisis keywords detected. Please seek immediate help.",
                CRISIS_RESOURCES,
            )

        entry = MoodEntry(
            id=_new_id("mood"),
            user_id=user_id,
            mood=mood,
            value=value,
            note=note or None,
            has_audio=bool(has_audio),
            timestamp=_ensure_utc(timestamp) if timestamp else self._clock(),
            location=location,
            emoji=mood_emoji(value),
        )
        with self._lock:
            self.moods.append(entry)

        logger.info("Mood check-in %s recorded for user %s (value=%s)", entry.id, user_id, value)
        return entry

    def get_mood_history(self, user_id: Optional[str]) -> list[MoodEntry]:
        """All of a user's check-ins, oldest first."""
        if not user_id:
            raise ValidationError("Missing required parameter: userId")
        with self._lock:
            entries = [m for m in self.moods if m.user_id == user_id]
        return sorted(entries, key=lambda m: m.timestamp)

    # ------------------------------------------------------------------
    # Support requests
    # ------------------------------------------------------------------

    def create_support_request(
        self,
        user_id: Optional[str],
        location: Optional[Location],
        message: Optional[str] = None,
        privacy_level: Optional[str] = None,
        radius: Optional[float] = None,
        timestamp: Optional[datetime] = None,
        expires_at: Optional[datetime] = None,
    ) -> SupportRequest:
        missing = _missing(userId=user_id, location=location)
        if missing:
            raise ValidationError.missing(*missing)

        if not self._rate_limiter.check(
            user_id,
            _ACTION_SUPPORT_REQUEST,
            self._settings.support_requests_per_window,
            self._window,
        ):
            limit = self._settings.support_requests_per_window
            raise RateLimitExceeded(
                f"You can only send {limit} support requests per hour. Please try again later."
            )

        if detect_crisis_keywords(message):
            logger.warning("Crisis keywords in support request from user %s, broadcast blocked", user_id)
            raise CrisisDetected(
                "Your message suggests you may be in crisis. Please contact emergency services.",
                CRISIS_RESOURCES,
            )

        now = self._clock()
        request = SupportRequest(
            id=_new_id("hug"),
            user_id=user_id,
            message=message or DEFAULT_REQUEST_MESSAGE,
            location=location,
            privacy_level=privacy_level or DEFAULT_PRIVACY_LEVEL,
            radius=radius or self._settings.default_request_radius_miles,
            timestamp=_ensure_utc(timestamp) if timestamp else now,
            expires_at=(
                _ensure_utc(expires_at)
                if expires_at
                else now + timedelta(minutes=self._settings.support_request_ttl_minutes)
            ),
            status=STATUS_ACTIVE,
            responses=0,
            is_verified_volunteer=self._rng.random() < self._settings.verified_volunteer_probability,
            neighborhood=neighborhood_name(location),
        )
        with self._lock:
            self.support_requests.append(request)

        self._broadcast_nearby(request)
        return request

    def list_nearby_support_requests(
        self,
        lat: Optional[float],
        lng: Optional[float],
        radius: Optional[float] = None,
    ) -> list[SupportRequest]:
        """Active, unexpired requests within radius miles, nearest first."""
        missing = _missing(lat=lat, lng=lng)
        if missing:
            raise ValidationError(f"Missing required parameters: {', '.join(missing)}")

        search_radius = radius or self._settings.default_search_radius_miles
        now = self._clock()

        with self._lock:
            candidates = [
                r for r in self.support_requests
                if r.status == STATUS_ACTIVE and r.expires_at > now
            ]

        nearby: list[tuple[float, SupportRequest]] = []
        for request in candidates:
            distance = haversine_miles(lat, lng, request.location.lat, request.location.lng)
            if distance <= search_radius:
                nearby.append((distance, request))

        nearby.sort(key=lambda pair: pair[0])
        return [request for _, request in nearby]

    def respond_to_support_request(
        self,
        request_id: Optional[str],
        responder_id: Optional[str],
        response: Optional[str],
    ) -> SupportResponse:
        missing = _missing(requestId=request_id, responderId=responder_id, response=response)
        if missing:
            raise ValidationError.missing(*missing)

        with self._lock:
            request = next((r for r in self.support_requests if r.id == request_id), None)
            if request is None:
                raise NotFound("Support request not found")

            if request.expires_at < self._clock():
                raise Expired("This support request has expired")

            record = SupportResponse(
                id=_new_id("response"),
                request_id=request_id,
                responder_id=responder_id,
                response=response,
                timestamp=self._clock(),
            )
            self.support_responses.append(record)
            request.responses += 1

            # Repeated accepts are all recorded; status just stays matched.
            if response == RESPONSE_ACCEPT:
                request.status = STATUS_MATCHED
                self._notify(
                    request.user_id,
                    DEFAULT_NOTIFICATION_TITLE,
                    MATCH_NOTIFICATION_MESSAGE,
                    DEFAULT_NOTIFICATION_TYPE,
                )

        logger.info(
            "Response %s (%s) recorded for support request %s",
            record.id,
            response,
            request_id,
        )
        return record

    def _broadcast_nearby(self, request: SupportRequest) -> None:
        # Fan-out to users inside the radius is simulated; nobody is notified.
        logger.info(
            "Broadcasting support request %s to %s (%s mile radius)",
            request.id,
            request.neighborhood,
            request.radius,
        )

    # ------------------------------------------------------------------
    # Push notifications
    # ------------------------------------------------------------------

    def send_push_notification(
        self,
        user_id: Optional[str],
        message: Optional[str],
        title: Optional[str] = None,
        type_: Optional[str] = None,
    ) -> PushNotification:
        missing = _missing(userId=user_id, message=message)
        if missing:
            raise ValidationError.missing(*missing)
        return self._notify(
            user_id,
            title or DEFAULT_NOTIFICATION_TITLE,
            message,
            type_ or DEFAULT_NOTIFICATION_TYPE,
        )

    def list_push_notifications(self, user_id: Optional[str]) -> tuple[list[PushNotification], int]:
        """A user's notifications, newest first, and how many are unread."""
        if not user_id:
            raise ValidationError("Missing required parameter: userId")
        with self._lock:
            notifications = [n for n in self.notifications if n.user_id == user_id]
        notifications.sort(key=lambda n: n.timestamp, reverse=True)
        unread = sum(1 for n in notifications if not n.read)
        return notifications, unread

    def _notify(self, user_id: str, title: str, message: str, type_: str) -> PushNotification:
        notification = PushNotification(
            id=_new_id("push"),
            user_id=user_id,
            title=title,
            message=message,
            type=type_,
            timestamp=self._clock(),
            read=False,
        )
        with self._lock:
            self.notifications.append(notification)
        logger.info("Push notification %s sent to user %s", notification.id, user_id)
        return notification

    # ------------------------------------------------------------------
    # Abuse reports
    # ------------------------------------------------------------------

    def report_abuse(
        self,
        reporter_id: Optional[str],
        content_id: Optional[str],
        content_type: Optional[str],
        reason: Optional[str] = None,
    ) -> AbuseReport:
        missing = _missing(reporterId=reporter_id, contentId=content_id, contentType=content_type)
        if missing:
            raise ValidationError.missing(*missing)

        report = AbuseReport(
            id=_new_id("report"),
            reporter_id=reporter_id,
            content_id=content_id,
            content_type=content_type,
            reason=reason,
            timestamp=self._clock(),
        )
        with self._lock:
            self.reports.append(report)

        logger.warning(
            "Abuse report %s: user %s reported %s %s",
            report.id,
            reporter_id,
            content_type,
            content_id,
        )
        return report

    # ------------------------------------------------------------------
    # Seed data
    # ------------------------------------------------------------------

    def load_seed_data(self, path: Optional[str]) -> None:
        """Replace moods and support requests with the contents of a seed file.

        The document shape is {"moods": [...], "hugRequests": [...]}. Any
        problem (missing file, bad JSON, invalid entry) leaves both
        collections empty and is logged, never raised.
        """
        if not path:
            return

        try:
            document = json.loads(Path(path).read_text(encoding="utf-8"))
            if not isinstance(document, dict):
                raise ValueError("seed document must be a JSON object")
            moods = [MoodEntry.model_validate(m) for m in document.get("moods") or []]
            requests = [
                SupportRequest.model_validate(r) for r in document.get("hugRequests") or []
            ]
        except FileNotFoundError:
            logger.info("No seed data found at %s, starting with empty data", path)
            return
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring seed data at %s: %s", path, exc)
            return

        for entry in moods:
            entry.timestamp = _ensure_utc(entry.timestamp)
        for request in requests:
            request.timestamp = _ensure_utc(request.timestamp)
            request.expires_at = _ensure_utc(request.expires_at)
            if request.neighborhood is None:
                request.neighborhood = neighborhood_name(request.location)

        with self._lock:
            self.moods = moods
            self.support_requests = requests

        logger.info(
            "Seed data loaded: %d moods, %d support requests",
            len(moods),
            len(requests),
        )


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_service: MoodMapService | None = None


def get_moodmap_service() -> MoodMapService:
    global _default_service
    if _default_service is None:
        _default_service = MoodMapService()
    return _default_service
