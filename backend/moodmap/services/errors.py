"""
Service Errors
==============
Every policy failure the request service can raise. Each carries the
HTTP status it maps to, so the single exception handler in main.py can
render it as a {success: false, message} envelope without routers
having to translate anything.
"""

from __future__ import annotations

from typing import Optional

from moodmap.models.common import CrisisResources


class MoodMapError(Exception):
    """Base class. Never fatal to the process."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(MoodMapError):
    """A required field is missing."""

    status_code = 400

    @classmethod
    def missing(cls, *fields: str) -> "ValidationError":
        noun = "field" if len(fields) == 1 else "fields"
        return cls(f"Missing required {noun}: {', '.join(fields)}")


class RateLimitExceeded(MoodMapError):
    status_code = 429


class CrisisDetected(MoodMapError):
    """Submission blocked because the text suggests self-harm risk."""

    status_code = 400

    def __init__(self, message: str, resources: CrisisResources) -> None:
        self.resources = resources
        super().__init__(message)


class NotFound(MoodMapError):
    status_code = 404


class Expired(MoodMapError):
    """Action attempted on a support request past its expires_at."""

    status_code = 400


def crisis_resources_of(exc: MoodMapError) -> Optional[CrisisResources]:
    return exc.resources if isinstance(exc, CrisisDetected) else None
