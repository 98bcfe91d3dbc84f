"""Report content: reference parsing, rendering and canonical serialization."""

from standuphub.content.document import (
    ContentDocument,
    Markup,
    PlainText,
    TaskReference,
    UserReference,
    classify_content,
)
from standuphub.content.parser import ContentParser, Degraded, ParseResult, Rendered, parse_content
from standuphub.content.serializer import serialize_for_save
from standuphub.content.session import ContentRenderSession
from standuphub.content.short_id import decode_short_id, encode_short_id, is_short_form
from standuphub.content.store import ReferenceStore, StaticReferenceStore, TaskRecord, UserRecord

__all__ = [
    "ContentDocument",
    "ContentParser",
    "ContentRenderSession",
    "Degraded",
    "Markup",
    "ParseResult",
    "PlainText",
    "ReferenceStore",
    "Rendered",
    "StaticReferenceStore",
    "TaskRecord",
    "TaskReference",
    "UserRecord",
    "UserReference",
    "classify_content",
    "decode_short_id",
    "encode_short_id",
    "is_short_form",
    "parse_content",
    "serialize_for_save",
]
