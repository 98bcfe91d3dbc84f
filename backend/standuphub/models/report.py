"""Standup report model."""

from datetime import date
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from standuphub.db.base import BaseModel

# Content fields, each stored as plain text with #TASK-<id> and @<id> tokens
REPORT_CONTENT_FIELDS = ("yesterday", "today", "blockers")


class StandupReport(BaseModel):
    """A user's daily standup report."""

    __tablename__ = "standup_reports"
    __table_args__ = (
        UniqueConstraint("user_id", "report_date", name="uq_standup_report_user_date"),
    )

    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    report_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    yesterday: Mapped[str] = mapped_column(Text, nullable=False, default="")
    today: Mapped[str] = mapped_column(Text, nullable=False, default="")
    blockers: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<StandupReport user_id={self.user_id} date={self.report_date}>"
