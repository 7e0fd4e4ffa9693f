"""
Abuse Report Router
===================
POST /report-abuse — Flag a mood note or support request for review.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from moodmap.models.common import ErrorEnvelope
from moodmap.models.report import AbuseReportAck, AbuseReportCreate
from moodmap.services.moodmap import MoodMapService, get_moodmap_service

router = APIRouter(tags=["reports"])


@router.post(
    "/report-abuse",
    response_model=AbuseReportAck,
    summary="Report inappropriate content",
    responses={400: {"model": ErrorEnvelope, "description": "Missing required fields"}},
)
async def report_abuse(
    body: AbuseReportCreate,
    service: MoodMapService = Depends(get_moodmap_service),
) -> AbuseReportAck:
    report = service.report_abuse(
        reporter_id=body.reporter_id,
        content_id=body.content_id,
        content_type=body.content_type,
        reason=body.reason,
    )
    return AbuseReportAck(
        message="Report submitted. Our team will review this content.",
        report_id=report.id,
    )
