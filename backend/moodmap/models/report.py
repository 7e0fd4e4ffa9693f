"""
Abuse Report Schemas
====================
Reports are acknowledged immediately and kept in memory for the
moderation team. No automated moderation happens here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from moodmap.models.common import CamelModel, Envelope


class AbuseReportCreate(CamelModel):
    reporter_id: Optional[str] = None
    content_id: Optional[str] = None
    content_type: Optional[str] = Field(
        default=None,
        description="Kind of content reported, e.g. 'hug-request' or 'mood'.",
    )
    reason: Optional[str] = None


class AbuseReport(CamelModel):
    id: str
    reporter_id: str
    content_id: str
    content_type: str
    reason: Optional[str] = None
    timestamp: datetime


class AbuseReportAck(Envelope):
    report_id: str
