"""
Support Request Router
======================
POST /hug-requests         — Broadcast a localized support request.
GET  /nearby-hug-requests  — Active requests within a radius, nearest first.
POST /hug-responses        — Answer a request (accept / decline).

Requests expire 30 minutes after creation unless the client sends its
own expiresAt. Expiry is evaluated on read and on respond; nothing is
ever deleted.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from moodmap.models.common import ErrorEnvelope
from moodmap.models.support import (
    NearbySupportRequests,
    SupportRequestCreate,
    SupportRequestCreated,
    SupportResponseCreate,
    SupportResponseRecorded,
)
from moodmap.services.moodmap import MoodMapService, get_moodmap_service

router = APIRouter(tags=["support"])


@router.post(
    "/hug-requests",
    response_model=SupportRequestCreated,
    summary="Create a support request",
    responses={
        400: {"model": ErrorEnvelope, "description": "Missing fields or crisis keywords detected"},
        429: {"model": ErrorEnvelope, "description": "More than 3 requests in the last hour"},
    },
)
async def create_support_request(
    body: SupportRequestCreate,
    service: MoodMapService = Depends(get_moodmap_service),
) -> SupportRequestCreated:
    request = service.create_support_request(
        user_id=body.user_id,
        location=body.location,
        message=body.message,
        privacy_level=body.privacy_level,
        radius=body.radius,
        timestamp=body.timestamp,
        expires_at=body.expires_at,
    )
    return SupportRequestCreated(message="Support request created", request=request)


@router.get(
    "/nearby-hug-requests",
    response_model=NearbySupportRequests,
    summary="List nearby active support requests",
    responses={400: {"model": ErrorEnvelope, "description": "lat or lng missing"}},
)
async def list_nearby_support_requests(
    lat: Optional[float] = Query(default=None),
    lng: Optional[float] = Query(default=None),
    radius: Optional[float] = Query(default=None, ge=0, description="Search radius in miles."),
    service: MoodMapService = Depends(get_moodmap_service),
) -> NearbySupportRequests:
    requests = service.list_nearby_support_requests(lat, lng, radius)
    return NearbySupportRequests(requests=requests, count=len(requests))


@router.post(
    "/hug-responses",
    response_model=SupportResponseRecorded,
    summary="Respond to a support request",
    responses={
        400: {"model": ErrorEnvelope, "description": "Missing fields or request expired"},
        404: {"model": ErrorEnvelope, "description": "Support request not found"},
    },
)
async def respond_to_support_request(
    body: SupportResponseCreate,
    service: MoodMapService = Depends(get_moodmap_service),
) -> SupportResponseRecorded:
    response = service.respond_to_support_request(
        request_id=body.request_id,
        responder_id=body.responder_id,
        response=body.response,
    )
    return SupportResponseRecorded(message="Response recorded", response=response)
