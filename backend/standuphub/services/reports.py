"""Standup report service: save editor content, render stored content."""

import asyncio
from datetime import date
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from standuphub.content.parser import ContentParser, ParseResult
from standuphub.content.serializer import serialize_for_save
from standuphub.exceptions import ReportNotFoundError
from standuphub.models.report import REPORT_CONTENT_FIELDS, StandupReport

logger = structlog.get_logger()


class ReportService:
    """Service for saving and rendering standup reports.

    Content arrives as editor documents and is stored flattened; saving
    overwrites whatever was there (last write wins).
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save_report(
        self,
        user_id: UUID,
        report_date: date,
        content: dict[str, Any],
    ) -> StandupReport:
        """Create the user's report for a date, or overwrite the existing one."""
        result = await self.db.execute(
            select(StandupReport).where(
                and_(
                    StandupReport.user_id == user_id,
                    StandupReport.report_date == report_date,
                )
            )
        )
        report = result.scalar_one_or_none()
        created = report is None

        if report is None:
            report = StandupReport(user_id=user_id, report_date=report_date)
            self.db.add(report)

        self._apply_content(report, content, replace_all=True)
        await self.db.commit()
        await self.db.refresh(report)

        logger.info(
            "standup_report_saved",
            report_id=str(report.id),
            user_id=str(user_id),
            report_date=report_date.isoformat(),
            created=created,
        )
        return report

    async def get_report(self, report_id: UUID) -> StandupReport:
        """Get a report by id."""
        result = await self.db.execute(
            select(StandupReport).where(StandupReport.id == report_id)
        )
        report = result.scalar_one_or_none()
        if report is None:
            raise ReportNotFoundError(str(report_id))
        return report

    async def update_report(self, report_id: UUID, content: dict[str, Any]) -> StandupReport:
        """Overwrite the content fields that are present in ``content``."""
        report = await self.get_report(report_id)
        self._apply_content(report, content, replace_all=False)
        await self.db.commit()
        await self.db.refresh(report)

        logger.info(
            "standup_report_updated",
            report_id=str(report.id),
            fields=sorted(k for k in content if k in REPORT_CONTENT_FIELDS),
        )
        return report

    async def render_report(
        self,
        report: StandupReport,
        parser: ContentParser,
    ) -> dict[str, ParseResult]:
        """Render every content field of a report."""
        results = await asyncio.gather(
            *(parser.parse(getattr(report, field)) for field in REPORT_CONTENT_FIELDS)
        )
        rendered = dict(zip(REPORT_CONTENT_FIELDS, results))

        degraded = [field for field, result in rendered.items() if result.degraded]
        if degraded:
            logger.warning(
                "standup_report_render_degraded",
                report_id=str(report.id),
                fields=degraded,
            )
        return rendered

    def _apply_content(
        self,
        report: StandupReport,
        content: dict[str, Any],
        replace_all: bool,
    ) -> None:
        for field in REPORT_CONTENT_FIELDS:
            if field in content:
                setattr(report, field, serialize_for_save(content[field]))
            elif replace_all:
                setattr(report, field, "")
