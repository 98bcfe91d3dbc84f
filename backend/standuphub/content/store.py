"""Lookup interface the parser resolves references against.

The parser only ever reads from the store: one batch lookup for all task ids
and one for all user ids of a document. Ids that are not found are simply
missing from the result.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

from standuphub.content.short_id import is_short_form, matches_short_id


@dataclass(frozen=True)
class TaskRecord:
    """Task fields needed to render a chip."""
    id: str
    title: Optional[str] = None


@dataclass(frozen=True)
class UserRecord:
    """User fields needed to render a mention."""
    id: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class ReferenceStore(ABC):
    """Batch lookups for referenced tasks and users.

    Implementations must be safe to call concurrently: the parser awaits
    both lookups together.
    """

    @abstractmethod
    async def lookup_tasks_by_ids(self, ids: Set[str]) -> List[TaskRecord]:
        """Fetch tasks by full id or short id.

        Args:
            ids: Full task ids, and short ids as written in content

        Returns:
            Records for the tasks that exist, in no particular order
        """
        pass

    @abstractmethod
    async def lookup_users_by_ids(self, ids: Set[str]) -> List[UserRecord]:
        """Fetch users by full id. Missing users are left out."""
        pass


class StaticReferenceStore(ReferenceStore):
    """Store backed by records held in memory.

    Used for previews where the referenced records are already loaded, and
    in tests.
    """

    def __init__(
        self,
        tasks: Optional[Iterable[TaskRecord]] = None,
        users: Optional[Iterable[UserRecord]] = None,
    ):
        self.tasks = {task.id.lower(): task for task in tasks or []}
        self.users = {user.id.lower(): user for user in users or []}

    async def lookup_tasks_by_ids(self, ids: Set[str]) -> List[TaskRecord]:
        found: dict[str, TaskRecord] = {}
        for task_id in ids:
            if is_short_form(task_id):
                match = next(
                    (t for key, t in self.tasks.items() if matches_short_id(key, task_id)),
                    None,
                )
            else:
                match = self.tasks.get(task_id.lower())
            if match is not None:
                found[match.id] = match
        return list(found.values())

    async def lookup_users_by_ids(self, ids: Set[str]) -> List[UserRecord]:
        return [self.users[i.lower()] for i in ids if i.lower() in self.users]
