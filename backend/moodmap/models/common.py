"""
Shared Schemas
==============
Base model and small value types reused across the MoodMap API.

The mobile prototype speaks camelCase JSON (userId, expiresAt, ...), so
every schema aliases its snake_case attributes to camelCase. Both forms
are accepted on input; responses are always serialised by alias.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every API schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(CamelModel):
    """A WGS84 coordinate pair."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class CrisisResources(CamelModel):
    """Emergency contacts returned whenever a submission is blocked."""

    phone: str
    text: str
    url: str


class Envelope(CamelModel):
    """Every response carries a success flag and an optional message."""

    success: bool = True
    message: Optional[str] = None


class ErrorEnvelope(Envelope):
    """Shape of every non-2xx response."""

    success: bool = False
    crisis_resources: Optional[CrisisResources] = None


class HealthResponse(Envelope):
    timestamp: str
