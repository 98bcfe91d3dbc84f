"""Standup report endpoints."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

import structlog
from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from standuphub.api.deps import ReferenceStoreDep, build_parser, render_payload
from standuphub.api.v1.content import RenderResponse
from standuphub.db.session import DBSession
from standuphub.exceptions import ReportNotFoundError
from standuphub.models.report import StandupReport
from standuphub.services.reports import ReportService

router = APIRouter()
logger = structlog.get_logger()

# Editor documents (TipTap JSON), JSON strings or plain text
EditorContent = dict[str, Any] | list[Any] | str | None


# Request/Response Models
class ReportSave(BaseModel):
    """Save a user's report for a day."""

    user_id: UUID
    report_date: date
    yesterday: EditorContent = None
    today: EditorContent = None
    blockers: EditorContent = None


class ReportUpdate(BaseModel):
    """Replace some content fields of a report."""

    yesterday: EditorContent = None
    today: EditorContent = None
    blockers: EditorContent = None


class ReportResponse(BaseModel):
    """Stored report."""

    id: UUID
    user_id: UUID
    report_date: date
    yesterday: str
    today: str
    blockers: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RenderedReportResponse(BaseModel):
    """Report with every content field rendered."""

    id: UUID
    user_id: UUID
    report_date: date
    yesterday: RenderResponse
    today: RenderResponse
    blockers: RenderResponse


async def _get_report_or_404(service: ReportService, report_id: UUID) -> StandupReport:
    try:
        return await service.get_report(report_id)
    except ReportNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Report not found",
        )


@router.post("/", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def save_report(
    data: ReportSave,
    db: DBSession,
) -> StandupReport:
    """Save a report; an existing report for the same user and day is overwritten."""
    service = ReportService(db)
    return await service.save_report(
        user_id=data.user_id,
        report_date=data.report_date,
        content=data.model_dump(include={"yesterday", "today", "blockers"}),
    )


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: UUID,
    db: DBSession,
) -> StandupReport:
    """Get a stored report."""
    return await _get_report_or_404(ReportService(db), report_id)


@router.put("/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: UUID,
    data: ReportUpdate,
    db: DBSession,
) -> StandupReport:
    """Replace the content fields sent in the request."""
    service = ReportService(db)
    await _get_report_or_404(service, report_id)
    return await service.update_report(report_id, data.model_dump(exclude_unset=True))


@router.get("/{report_id}/rendered", response_model=RenderedReportResponse)
async def get_rendered_report(
    report_id: UUID,
    db: DBSession,
    store: ReferenceStoreDep,
    mode: str | None = Query(None, pattern="^(view|editor)$"),
) -> dict:
    """Get a report with task and user references rendered as chips."""
    service = ReportService(db)
    report = await _get_report_or_404(service, report_id)
    rendered = await service.render_report(report, build_parser(store, mode))

    return {
        "id": report.id,
        "user_id": report.user_id,
        "report_date": report.report_date,
        **{field: render_payload(result) for field, result in rendered.items()},
    }
