"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends

from standuphub.config import get_settings
from standuphub.content.parser import ContentParser, ParseResult
from standuphub.db.session import SessionFactory
from standuphub.services.references import ReferenceLookupService

settings = get_settings()


def get_reference_store(session_factory: SessionFactory) -> ReferenceLookupService:
    """Reference lookups backed by the application database."""
    return ReferenceLookupService(
        session_factory,
        short_id_scan_limit=settings.short_id_scan_limit,
    )


ReferenceStoreDep = Annotated[ReferenceLookupService, Depends(get_reference_store)]


def build_parser(store: ReferenceLookupService, mode: str | None = None) -> ContentParser:
    """Content parser configured from settings."""
    return ContentParser(
        store,
        mode=mode or settings.content_default_mode,
        title_max_length=settings.content_title_max_length,
    )


def render_payload(result: ParseResult) -> dict:
    """Response body for a rendered piece of content."""
    return {
        "markup": result.markup,
        "degraded": result.degraded,
        "task_ids": result.task_ids,
        "user_ids": result.user_ids,
    }
