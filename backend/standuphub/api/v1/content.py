"""Content rendering and serialization endpoints."""

from typing import Any, Literal

import structlog
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from standuphub.api.deps import ReferenceStoreDep, build_parser, render_payload
from standuphub.content.serializer import serialize_for_save
from standuphub.content.short_id import decode_short_id, encode_short_id, looks_like_full_id

router = APIRouter()
logger = structlog.get_logger()


# Request/Response Models
class RenderRequest(BaseModel):
    """Stored content to render."""

    content: str | None = Field(None, max_length=100000)
    mode: Literal["view", "editor"] | None = None


class RenderResponse(BaseModel):
    """Rendered content.

    When ``degraded`` is true, ``markup`` is the original content unchanged
    and should be shown as text.
    """

    markup: str
    degraded: bool
    task_ids: list[str]
    user_ids: list[str]


class SerializeRequest(BaseModel):
    """Editor document to flatten for storage."""

    document: dict[str, Any] | list[Any] | str | None = None


class SerializeResponse(BaseModel):
    """Flattened content as it would be stored."""

    content: str


class ShortIdResponse(BaseModel):
    """Short id of a full id."""

    full_id: str
    short_id: str
    prefix: str


@router.post("/render", response_model=RenderResponse)
async def render_content(
    data: RenderRequest,
    store: ReferenceStoreDep,
) -> dict:
    """Render stored content with task and user chips."""
    result = await build_parser(store, data.mode).parse(data.content)
    return render_payload(result)


@router.post("/serialize", response_model=SerializeResponse)
async def serialize_content(data: SerializeRequest) -> dict:
    """Flatten an editor document into its stored text form."""
    return {"content": serialize_for_save(data.document)}


@router.get("/short-ids/{full_id}", response_model=ShortIdResponse)
async def get_short_id(full_id: str) -> dict:
    """Get the short id used in ``#<short id>`` links for a full id."""
    if not looks_like_full_id(full_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Malformed identifier '{full_id}'",
        )

    short_id = encode_short_id(full_id)
    return {
        "full_id": full_id.lower(),
        "short_id": short_id,
        "prefix": decode_short_id(short_id),
    }
