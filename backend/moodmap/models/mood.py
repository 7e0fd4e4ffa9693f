"""
Mood Check-in Schemas
=====================
Pydantic models for the mood check-in API. These are the contract
between the mobile prototype and the backend.

Key design decisions:
- Required fields are Optional at the schema level. Missing fields are
  reported by the service as a 400 envelope listing every missing name,
  which is what the prototype's error banner expects.
- value is "required but possibly zero": only absence is an error.
- emoji is derived server-side and never accepted from the client.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from moodmap.models.common import CamelModel, Envelope, Location


# ---------------------------------------------------------------------------
# Emoji scale
# ---------------------------------------------------------------------------

MOOD_EMOJIS: dict[int, str] = {
    5: "\U0001F60A",  # smiling
    4: "\U0001F60C",  # relieved
    3: "\U0001F610",  # neutral
    2: "\U0001F630",  # anxious
    1: "\U0001F622",  # crying
}

DEFAULT_MOOD_EMOJI = MOOD_EMOJIS[3]


def mood_emoji(value: int) -> str:
    """Map a 1-5 mood value to its emoji; anything else is neutral."""
    return MOOD_EMOJIS.get(value, DEFAULT_MOOD_EMOJI)


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

class MoodCheckinRequest(CamelModel):
    """Payload the app sends when the user completes a check-in."""

    user_id: Optional[str] = None
    mood: Optional[str] = Field(
        default=None,
        description="Mood label chosen by the user, e.g. 'calm' or 'anxious'.",
    )
    value: Optional[int] = Field(
        default=None,
        description="Mood value, 1 = very low, 5 = great. Zero is accepted.",
    )
    note: Optional[str] = None
    has_audio: Optional[bool] = None
    timestamp: Optional[datetime] = None
    location: Optional[Location] = None


# ---------------------------------------------------------------------------
# Stored entity / responses
# ---------------------------------------------------------------------------

class MoodEntry(CamelModel):
    """A single check-in. Never mutated once stored."""

    id: str
    user_id: str
    mood: str
    value: int
    note: Optional[str] = None
    has_audio: bool = False
    timestamp: datetime
    location: Optional[Location] = None
    emoji: str = DEFAULT_MOOD_EMOJI


class MoodCheckinResponse(Envelope):
    mood: MoodEntry


class MoodHistoryResponse(Envelope):
    moods: list[MoodEntry]
    count: int
