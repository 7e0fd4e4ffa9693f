"""
Safety Policies
===============
Crisis keyword detection and per-user rate limiting.

Crisis detection is a case-insensitive substring match. A hit blocks
the submission outright (nothing is stored or broadcast) and the
caller receives emergency resources instead.

Rate limiting uses a sliding window of action timestamps per
(user_id, action). Windows are pruned lazily on each check, so there
is no background sweep to manage.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from moodmap.models.common import CrisisResources

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Crisis detection
# ---------------------------------------------------------------------------

CRISIS_KEYWORDS: tuple[str, ...] = (
    "suicide",
    "kill myself",
    "end it all",
    "want to die",
    "no reason to live",
    "better off dead",
    "suicidal",
)

CRISIS_RESOURCES = CrisisResources(
    phone="988",
    text="Text HOME to 741741",
    url="https://988lifeline.org/",
)


def detect_crisis_keywords(text: Optional[str]) -> bool:
    """True if text contains any crisis keyword, ignoring case."""
    if not text:
        return False
    lowered = text.lower()
    return any(keyword in lowered for keyword in CRISIS_KEYWORDS)


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------

class RateLimiter:
    """Sliding-window counter keyed by (user_id, action)."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._windows: dict[tuple[str, str], list[datetime]] = {}
        self._lock = threading.Lock()

    def check(
        self,
        user_id: str,
        action: str,
        max_requests: int,
        window: timedelta,
    ) -> bool:
        """Record one action and return True, or return False if over the limit.

        A denied attempt is not recorded, so it does not extend the window.
        """
        key = (user_id, action)
        now = self._clock()
        with self._lock:
            recent = [t for t in self._windows.pop(key, []) if now - t < window]
            if len(recent) >= max_requests:
                self._windows[key] = recent
                logger.warning("Rate limit hit: user=%s action=%s", user_id, action)
                return False
            recent.append(now)
            self._windows[key] = recent
            return True
