"""Task reference endpoints."""

import structlog
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from standuphub.api.deps import ReferenceStoreDep
from standuphub.content.chips import display_short_id
from standuphub.exceptions import MalformedIdentifierError, TaskNotFoundError

router = APIRouter()
logger = structlog.get_logger()


class TaskReferenceResponse(BaseModel):
    """Task a reference token points to."""

    id: str
    short_id: str
    title: str | None


@router.get("/resolve/{token}", response_model=TaskReferenceResponse)
async def resolve_task_reference(
    token: str,
    store: ReferenceStoreDep,
) -> dict:
    """Resolve a task link (full id or short id) to the task it points to."""
    try:
        record = await store.resolve_task(token)
    except MalformedIdentifierError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except TaskNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        )

    return {
        "id": record.id,
        "short_id": display_short_id(record.id),
        "title": record.title,
    }
