"""
Support Request Schemas
=======================
Pydantic models for hug requests (localized calls for support) and the
responses nearby community members send back.

A SupportRequest is the only entity that is mutated after creation:
its responses counter and its status (active -> matched) change when a
response arrives. Expiry is never stored as a status; it is evaluated
against expires_at whenever a request is read or answered.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from moodmap.models.common import CamelModel, Envelope, Location


# ---------------------------------------------------------------------------
# Allowed values
# ---------------------------------------------------------------------------

STATUS_ACTIVE = "active"
STATUS_MATCHED = "matched"

RESPONSE_ACCEPT = "accept"
RESPONSE_DECLINE = "decline"

DEFAULT_REQUEST_MESSAGE = "Someone nearby needs support"
DEFAULT_PRIVACY_LEVEL = "neighborhood"


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class SupportRequestCreate(CamelModel):
    """Payload the app sends to broadcast a support request."""

    user_id: Optional[str] = None
    message: Optional[str] = None
    location: Optional[Location] = None
    privacy_level: Optional[str] = Field(
        default=None,
        description="public | neighborhood | anonymous. Free text, not enforced.",
    )
    radius: Optional[float] = Field(default=None, ge=0, description="Broadcast radius in miles.")
    timestamp: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class SupportResponseCreate(CamelModel):
    """Payload a community member sends to answer a support request."""

    request_id: Optional[str] = None
    responder_id: Optional[str] = None
    response: Optional[str] = Field(
        default=None,
        description="'accept' matches the request; any other value is recorded as-is.",
    )


# ---------------------------------------------------------------------------
# Stored entities
# ---------------------------------------------------------------------------

class SupportRequest(CamelModel):
    """A broadcast call for nearby support, geo-scoped and time-limited."""

    id: str
    user_id: str
    message: str = DEFAULT_REQUEST_MESSAGE
    location: Location
    privacy_level: str = DEFAULT_PRIVACY_LEVEL
    radius: float = 3
    timestamp: datetime
    expires_at: datetime
    status: Literal["active", "matched"] = STATUS_ACTIVE
    responses: int = 0
    is_verified_volunteer: bool = False
    neighborhood: Optional[str] = None


class SupportResponse(CamelModel):
    """One answer to a support request. Immutable once recorded."""

    id: str
    request_id: str
    responder_id: str
    response: str
    timestamp: datetime


# ---------------------------------------------------------------------------
# Response envelopes
# ---------------------------------------------------------------------------

class SupportRequestCreated(Envelope):
    request: SupportRequest


class NearbySupportRequests(Envelope):
    requests: list[SupportRequest]
    count: int


class SupportResponseRecorded(Envelope):
    response: SupportResponse
