"""
Mood Check-in Router
====================
POST /mood — Submit a mood check-in.
GET  /mood — Mood history for one user, oldest first.

Every check-in goes through the same pipeline in the service:

    1. Required fields (userId, mood, value; value may be 0)
    2. Rate limit: 20 check-ins per user per rolling hour
    3. Crisis keyword screen on the note; a hit blocks the check-in and
       returns emergency resources instead
    4. Store with a server-derived emoji

Failures surface as {success: false, message} envelopes via the
exception handler registered in main.py.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from moodmap.models.common import ErrorEnvelope
from moodmap.models.mood import MoodCheckinRequest, MoodCheckinResponse, MoodHistoryResponse
from moodmap.services.moodmap import MoodMapService, get_moodmap_service

router = APIRouter(prefix="/mood", tags=["mood"])


@router.post(
    "",
    response_model=MoodCheckinResponse,
    summary="Submit a mood check-in",
    responses={
        400: {"model": ErrorEnvelope, "description": "Missing fields or crisis keywords detected"},
        429: {"model": ErrorEnvelope, "description": "More than 20 check-ins in the last hour"},
    },
)
async def submit_mood_checkin(
    body: MoodCheckinRequest,
    service: MoodMapService = Depends(get_moodmap_service),
) -> MoodCheckinResponse:
    entry = service.submit_mood(
        user_id=body.user_id,
        mood=body.mood,
        value=body.value,
        note=body.note,
        has_audio=body.has_audio,
        timestamp=body.timestamp,
        location=body.location,
    )
    return MoodCheckinResponse(message="Mood check-in recorded", mood=entry)


@router.get(
    "",
    response_model=MoodHistoryResponse,
    summary="Get a user's mood history",
    responses={400: {"model": ErrorEnvelope, "description": "userId missing"}},
)
async def get_mood_history(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    service: MoodMapService = Depends(get_moodmap_service),
) -> MoodHistoryResponse:
    moods = service.get_mood_history(user_id)
    return MoodHistoryResponse(moods=moods, count=len(moods))
