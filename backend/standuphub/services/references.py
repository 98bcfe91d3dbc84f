"""Database-backed reference lookups for the content parser."""

from typing import Iterable, List, Set, Tuple
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from standuphub.config import get_settings
from standuphub.content.short_id import is_short_form, looks_like_full_id, matches_short_id
from standuphub.content.store import ReferenceStore, TaskRecord, UserRecord
from standuphub.exceptions import MalformedIdentifierError, TaskNotFoundError
from standuphub.models.task import Task
from standuphub.models.user import User

logger = structlog.get_logger()


def split_ids(ids: Iterable[str]) -> Tuple[Set[UUID], Set[str]]:
    """Separate full ids from short ids; anything else is dropped."""
    full_ids: Set[UUID] = set()
    short_ids: Set[str] = set()
    for value in ids:
        if looks_like_full_id(value):
            full_ids.add(UUID(value))
        elif is_short_form(value):
            short_ids.add(value)
    return full_ids, short_ids


class ReferenceLookupService(ReferenceStore):
    """Resolve task and user references against the database.

    Each lookup opens its own session from the factory so the parser can run
    the task and user lookups at the same time.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        short_id_scan_limit: int | None = None,
    ):
        self.session_factory = session_factory
        if short_id_scan_limit is None:
            short_id_scan_limit = get_settings().short_id_scan_limit
        self.short_id_scan_limit = short_id_scan_limit

    # =========================================================================
    # Batch lookups
    # =========================================================================

    async def lookup_tasks_by_ids(self, ids: Set[str]) -> List[TaskRecord]:
        """Fetch id and title for every task referenced by full or short id."""
        full_ids, short_ids = split_ids(ids)

        async with self.session_factory() as session:
            if short_ids:
                full_ids |= await self._resolve_short_ids(session, short_ids)
            if not full_ids:
                return []

            result = await session.execute(
                select(Task.id, Task.title).where(Task.id.in_(list(full_ids)))
            )
            records = [TaskRecord(id=str(row.id), title=row.title) for row in result]

        logger.debug(
            "task_references_resolved",
            requested=len(ids),
            found=len(records),
        )
        return records

    async def lookup_users_by_ids(self, ids: Set[str]) -> List[UserRecord]:
        """Fetch id, name and avatar for every mentioned user."""
        full_ids, _ = split_ids(ids)
        if not full_ids:
            return []

        async with self.session_factory() as session:
            result = await session.execute(
                select(User.id, User.name, User.avatar_url).where(User.id.in_(list(full_ids)))
            )
            records = [
                UserRecord(id=str(row.id), name=row.name, avatar_url=row.avatar_url)
                for row in result
            ]

        logger.debug(
            "user_references_resolved",
            requested=len(ids),
            found=len(records),
        )
        return records

    # =========================================================================
    # Single task resolution
    # =========================================================================

    async def resolve_task(self, token: str) -> TaskRecord:
        """Resolve a full id or short id to one task.

        Raises:
            MalformedIdentifierError: If the token is neither form
            TaskNotFoundError: If no task matches
        """
        token = token.strip()
        if looks_like_full_id(token):
            task_id = UUID(token)
        elif is_short_form(token):
            async with self.session_factory() as session:
                matches = await self._resolve_short_ids(session, {token})
            if not matches:
                raise TaskNotFoundError(token)
            task_id = matches.pop()
        else:
            raise MalformedIdentifierError(token)

        async with self.session_factory() as session:
            result = await session.execute(
                select(Task.id, Task.title).where(Task.id == task_id)
            )
            row = result.first()

        if row is None:
            raise TaskNotFoundError(token)
        return TaskRecord(id=str(row.id), title=row.title)

    async def _resolve_short_ids(self, session: AsyncSession, short_ids: Set[str]) -> Set[UUID]:
        """Match short ids against the most recent task ids.

        Only a bounded window of recent tasks is scanned and the first
        prefix match wins; older tasks or colliding prefixes can resolve to
        nothing or to the wrong task.
        """
        result = await session.execute(
            select(Task.id)
            .order_by(Task.created_at.desc())
            .limit(self.short_id_scan_limit)
        )
        recent_ids = list(result.scalars().all())

        resolved: Set[UUID] = set()
        for short_id in short_ids:
            match = next(
                (task_id for task_id in recent_ids if matches_short_id(str(task_id), short_id)),
                None,
            )
            if match is None:
                logger.info("short_id_not_found", short_id=short_id, scanned=len(recent_ids))
                continue
            resolved.add(match)
        return resolved
