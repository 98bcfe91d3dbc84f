"""Render stored report content as markup with interactive reference chips.

Stored content carries task and user references in several encodings (see
``standuphub.content.tokens``). Parsing a document:

1. undoes accidental double HTML escaping,
2. decides between plain text and block markup,
3. scans every reference token,
4. fetches all referenced tasks and all referenced users, one batch each,
   concurrently,
5. copies the text between tokens and puts a placeholder where each token was,
6. builds block structure (plain text) or tidies existing markup,
7. swaps the placeholders for rendered chips.

Chips go in last so their markup is never mistaken for list markers.

Example:
    ```python
    parser = ContentParser(store)
    result = await parser.parse("Fixed #TASK-99 yesterday\\n- Reviewed PR")
    if result.degraded:
        ...  # show result.markup as plain text
    ```
"""

import asyncio
import re
from dataclasses import dataclass
from html import escape
from typing import Dict, List, Optional, Sequence, Tuple, Union

import structlog

from standuphub.content.blocks import (
    LINE_BREAK_PATTERN,
    normalize_markup,
    plain_text_to_blocks,
    sanitize_markup,
)
from standuphub.content.chips import (
    DEFAULT_TITLE_MAX_LENGTH,
    FALLBACK_USER_NAME,
    RenderMode,
    display_short_id,
    render_task_chip,
    render_user_chip,
)
from standuphub.content.document import (
    ContentDocument,
    EntityReference,
    Markup,
    PlainText,
    TaskReference,
    UserReference,
    classify_content,
    unescape_if_double_escaped,
)
from standuphub.content.short_id import is_short_form, matches_short_id
from standuphub.content.store import ReferenceStore, TaskRecord, UserRecord
from standuphub.content.tokens import ReferenceToken, collect_reference_ids, scan_references
from standuphub.exceptions import LookupFailedError

logger = structlog.get_logger()

_PLACEHOLDER = "\x00{}\x00"
_PLACEHOLDER_PATTERN = re.compile(r"\x00(\d+)\x00")


@dataclass(frozen=True)
class Rendered:
    """Content rendered with chips and block structure."""
    markup: str
    references: Tuple[EntityReference, ...] = ()

    @property
    def degraded(self) -> bool:
        return False

    @property
    def task_ids(self) -> List[str]:
        return [r.id for r in self.references if isinstance(r, TaskReference)]

    @property
    def user_ids(self) -> List[str]:
        return [r.id for r in self.references if isinstance(r, UserReference)]


@dataclass(frozen=True)
class Degraded:
    """Rendering failed; the original content is shown as stored."""
    raw: str
    error: str

    @property
    def markup(self) -> str:
        return self.raw

    @property
    def degraded(self) -> bool:
        return True

    @property
    def references(self) -> Tuple[EntityReference, ...]:
        return ()

    @property
    def task_ids(self) -> List[str]:
        return []

    @property
    def user_ids(self) -> List[str]:
        return []


ParseResult = Union[Rendered, Degraded]


class _TaskIndex:
    """Resolved tasks, findable by full id or by short id."""

    def __init__(self, records: Sequence[TaskRecord]):
        self.records = list(records)
        self.by_id = {str(record.id).lower(): record for record in self.records}

    def find(self, ref_id: str) -> Optional[TaskRecord]:
        if is_short_form(ref_id):
            # First prefix match wins when two tasks share a short id
            return next(
                (r for r in self.records if matches_short_id(str(r.id), ref_id)),
                None,
            )
        return self.by_id.get(ref_id.lower())


def _check_records(records: object, entity: str) -> Sequence:
    if records is None:
        return []
    if not isinstance(records, (list, tuple)):
        raise LookupFailedError(entity, f"expected a list of records, got {type(records).__name__}")
    return records


async def _no_records() -> list:
    return []


class ContentParser:
    """Turns stored content into markup with task and user chips.

    ``parse`` never raises. Any failure while scanning, resolving or
    rendering is logged and the stored content comes back unchanged as a
    ``Degraded`` result.
    """

    def __init__(
        self,
        store: ReferenceStore,
        mode: RenderMode = "view",
        title_max_length: int = DEFAULT_TITLE_MAX_LENGTH,
    ):
        self.store = store
        self.mode = mode
        self.title_max_length = title_max_length

    async def parse(self, content: Union[str, ContentDocument, None]) -> ParseResult:
        """Render one document.

        Args:
            content: Stored content string, or an already classified
                ``PlainText`` / ``Markup`` document

        Returns:
            ``Rendered`` on success, ``Degraded`` holding the original
            content when rendering failed
        """
        if content is None:
            return Rendered("")

        raw = content.text if isinstance(content, PlainText) else (
            content.html if isinstance(content, Markup) else content
        )
        if not raw:
            return Rendered("")

        try:
            return await self._render(content)
        except Exception as exc:
            logger.exception(
                "content_parse_failed",
                error=str(exc),
                content_length=len(raw),
            )
            return Degraded(raw=raw, error=str(exc))

    async def _render(self, content: Union[str, ContentDocument]) -> Rendered:
        if isinstance(content, str):
            text = unescape_if_double_escaped(content.replace("\x00", ""))
            document = classify_content(text)
        else:
            document = content

        if isinstance(document, PlainText):
            text = LINE_BREAK_PATTERN.sub("\n", document.text.replace("\x00", ""))
        else:
            text = sanitize_markup(document.html.replace("\x00", ""))

        tokens = scan_references(text)
        task_ids, user_ids = collect_reference_ids(tokens)
        tasks, users = await self._resolve(task_ids, user_ids)

        body, chips, references = self._splice(
            text, tokens, tasks, users, escape_text=isinstance(document, PlainText)
        )

        if isinstance(document, PlainText):
            body = plain_text_to_blocks(body)
        else:
            body = normalize_markup(body)

        markup = _PLACEHOLDER_PATTERN.sub(lambda m: chips[int(m.group(1))], body)

        logger.debug(
            "content_parsed",
            shape="plain" if isinstance(document, PlainText) else "markup",
            tokens=len(tokens),
            task_ids=len(task_ids),
            user_ids=len(user_ids),
        )
        return Rendered(markup=markup, references=tuple(references))

    async def _resolve(
        self,
        task_ids: set[str],
        user_ids: set[str],
    ) -> Tuple[_TaskIndex, Dict[str, UserRecord]]:
        """Fetch tasks and users concurrently, skipping empty id sets."""
        task_records, user_records = await asyncio.gather(
            self.store.lookup_tasks_by_ids(task_ids) if task_ids else _no_records(),
            self.store.lookup_users_by_ids(user_ids) if user_ids else _no_records(),
        )
        task_records = _check_records(task_records, "Task")
        user_records = _check_records(user_records, "User")

        users = {str(user.id).lower(): user for user in user_records}
        return _TaskIndex(task_records), users

    def _splice(
        self,
        text: str,
        tokens: List[ReferenceToken],
        tasks: _TaskIndex,
        users: Dict[str, UserRecord],
        escape_text: bool,
    ) -> Tuple[str, List[str], List[EntityReference]]:
        """Replace each token with a placeholder and render its chip."""
        parts: List[str] = []
        chips: List[str] = []
        references: List[EntityReference] = []
        cursor = 0

        for token in tokens:
            gap = text[cursor:token.start]
            parts.append(escape(gap, quote=False) if escape_text else gap)
            parts.append(_PLACEHOLDER.format(len(chips)))

            if token.kind.target == "task":
                chip, reference = self._task_chip(token, tasks)
            else:
                chip, reference = self._user_chip(token, users)
            chips.append(chip)
            references.append(reference)
            cursor = token.end

        tail = text[cursor:]
        parts.append(escape(tail, quote=False) if escape_text else tail)
        return "".join(parts), chips, references

    def _task_chip(self, token: ReferenceToken, tasks: _TaskIndex) -> Tuple[str, TaskReference]:
        record = tasks.find(token.ref_id)
        task_id = str(record.id).lower() if record else token.ref_id
        title = (record.title if record else None) or token.title

        chip = render_task_chip(task_id, title, mode=self.mode, max_length=self.title_max_length)
        return chip, TaskReference(id=task_id, short_id=display_short_id(task_id), display_title=title)

    def _user_chip(self, token: ReferenceToken, users: Dict[str, UserRecord]) -> Tuple[str, UserReference]:
        record = users.get(token.ref_id.lower())
        name = record.name if record else None
        avatar_url = record.avatar_url if record else None

        chip = render_user_chip(token.ref_id, name, avatar_url, mode=self.mode)
        return chip, UserReference(
            id=token.ref_id,
            display_name=name or FALLBACK_USER_NAME,
            avatar_url=avatar_url,
        )


async def parse_content(
    raw: Union[str, ContentDocument, None],
    store: ReferenceStore,
    mode: RenderMode = "view",
) -> ParseResult:
    """Render stored content with a one-off parser."""
    return await ContentParser(store, mode=mode).parse(raw)
