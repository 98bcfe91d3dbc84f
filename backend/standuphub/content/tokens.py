"""Reference token scanning.

Finds task and user references in stored content. Five encodings have been
written over time and all of them are still read:

- ``#TASK-<id or short id>``
- ``[TASK:<id>|<title>]``
- ``<span ... data-id="<id>">...</span>`` or ``data-task-id`` (leaked editor span)
- ``@<full id>``
- ``<span ... data-user-id="<id>">...</span>`` (leaked editor span)

The patterns are joined into one alternation and scanned left to right, so
matches never overlap. A leaked span runs to its balanced closing tag and
swallows any ``@<id>`` inside it. Opening tags, bracket tags and leaked spans
are only searched a bounded distance, so unclosed markup cannot make scanning
quadratic.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Set, Tuple

from standuphub.content.short_id import looks_like_full_id

_FULL_ID = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

# Opening tags and leaked spans are only searched this far
MAX_TAG_LENGTH = 1000
MAX_LEAKED_SPAN_LENGTH = 2000

_SPAN_TAG = re.compile(r"<(/?)span\b[^>]*>", re.IGNORECASE)


class TokenKind(str, Enum):
    """Encodings a reference can appear in."""
    LEAKED_TASK_SPAN = "leaked_task_span"
    LEAKED_USER_SPAN = "leaked_user_span"
    BRACKET_TASK = "bracket_task"
    HASH_TASK = "hash_task"
    AT_MENTION = "at_mention"

    @property
    def target(self) -> str:
        """Entity type the token refers to: ``task`` or ``user``."""
        if self in (TokenKind.LEAKED_USER_SPAN, TokenKind.AT_MENTION):
            return "user"
        return "task"


@dataclass(frozen=True)
class ReferenceToken:
    """A reference found in content.

    Attributes:
        kind: Which encoding matched
        start: Starting character position in the content
        end: Ending character position in the content
        ref_id: Referenced id (full ids lowercased, short ids as written)
        raw: The matched text
        title: Title carried by a bracket tag, if any
    """
    kind: TokenKind
    start: int
    end: int
    ref_id: str
    raw: str
    title: Optional[str] = None


TOKEN_PATTERN = re.compile(
    "|".join([
        rf"""<span\b[^>]{{0,{MAX_TAG_LENGTH}}}?\bdata-(?:task-)?id=["'](?P<span_task>[0-9a-fA-F-]+)["'][^>]{{0,{MAX_TAG_LENGTH}}}>""",
        rf"""<span\b[^>]{{0,{MAX_TAG_LENGTH}}}?\bdata-user-id=["'](?P<span_user>{_FULL_ID})["'][^>]{{0,{MAX_TAG_LENGTH}}}>""",
        r"\[TASK:(?P<bracket_task>[^|\]]{1,100})\|(?P<bracket_title>[^\]]{1,500})\]",
        r"#TASK-(?P<hash_task>[0-9a-fA-F]+(?:-[0-9a-fA-F]+)*)",
        rf"@(?P<mention>{_FULL_ID})",
    ]),
    re.IGNORECASE | re.DOTALL,
)

_GROUP_KINDS = {
    "span_task": TokenKind.LEAKED_TASK_SPAN,
    "span_user": TokenKind.LEAKED_USER_SPAN,
    "bracket_task": TokenKind.BRACKET_TASK,
    "hash_task": TokenKind.HASH_TASK,
    "mention": TokenKind.AT_MENTION,
}


def _normalize_id(value: str) -> str:
    value = value.strip()
    if looks_like_full_id(value):
        return value.lower()
    return value


def _leaked_span_end(text: str, start: int) -> Optional[int]:
    """Position just past the </span> closing a span whose opening tag ends at ``start``.

    Nested spans are balanced. Returns None when the span is not closed
    within ``MAX_LEAKED_SPAN_LENGTH`` characters.
    """
    depth = 1
    limit = min(len(text), start + MAX_LEAKED_SPAN_LENGTH)
    for tag in _SPAN_TAG.finditer(text, start, limit):
        depth += -1 if tag.group(1) else 1
        if depth == 0:
            return tag.end()
    return None


def scan_references(text: str) -> List[ReferenceToken]:
    """Find every reference token in ``text``, ordered by position."""
    if not text:
        return []

    tokens: List[ReferenceToken] = []
    pos = 0
    while True:
        match = TOKEN_PATTERN.search(text, pos)
        if match is None:
            break

        group = match.lastgroup
        if group == "bracket_title":
            group = "bracket_task"
        kind = _GROUP_KINDS[group]

        end = match.end()
        if kind in (TokenKind.LEAKED_TASK_SPAN, TokenKind.LEAKED_USER_SPAN):
            end = _leaked_span_end(text, end)
            if end is None:
                # Unclosed span: not a reference, keep scanning after its opening tag
                pos = match.end()
                continue

        title = match.group("bracket_title") if kind is TokenKind.BRACKET_TASK else None
        tokens.append(ReferenceToken(
            kind=kind,
            start=match.start(),
            end=end,
            ref_id=_normalize_id(match.group(group)),
            raw=text[match.start():end],
            title=title.strip() if title else None,
        ))
        pos = end

    return tokens


def collect_reference_ids(tokens: Iterable[ReferenceToken]) -> Tuple[Set[str], Set[str]]:
    """Split tokens into distinct task ids and distinct user ids."""
    task_ids: Set[str] = set()
    user_ids: Set[str] = set()
    for token in tokens:
        if token.kind.target == "user":
            user_ids.add(token.ref_id)
        else:
            task_ids.add(token.ref_id)
    return task_ids, user_ids
