"""Content documents and the references found in them.

Stored content is a plain string in one of two shapes: plain text with
reference tokens and list markers, or block markup written by the editor.
Both shapes exist in the database because the format changed over time.
"""

from dataclasses import dataclass
from html import unescape
from typing import Optional, Union

from standuphub.content.blocks import has_block_markup

DOUBLE_ESCAPE_MARKERS = ("&lt;", "&gt;", "&amp;lt;")


@dataclass(frozen=True)
class PlainText:
    """Plain text content with reference tokens and ad-hoc list markers."""
    text: str


@dataclass(frozen=True)
class Markup:
    """Block markup content produced by the rich text editor."""
    html: str


ContentDocument = Union[PlainText, Markup]


@dataclass(frozen=True)
class TaskReference:
    """A task reference resolved for display.

    Attributes:
        id: Full task id, or the id as written when it did not resolve
        short_id: Short id shown on the chip
        display_title: Task title, if one was found
    """
    id: str
    short_id: str
    display_title: Optional[str] = None


@dataclass(frozen=True)
class UserReference:
    """A user mention resolved for display.

    Attributes:
        id: Full user id
        display_name: User name, ``"User"`` when it did not resolve
        avatar_url: Avatar image URL, if any
    """
    id: str
    display_name: str
    avatar_url: Optional[str] = None


EntityReference = Union[TaskReference, UserReference]


def unescape_if_double_escaped(raw: str) -> str:
    """Undo one level of HTML escaping when content was stored escaped twice."""
    if any(marker in raw for marker in DOUBLE_ESCAPE_MARKERS):
        return unescape(raw)
    return raw


def classify_content(raw: str) -> ContentDocument:
    """Decide whether stored content is block markup or plain text."""
    if has_block_markup(raw):
        return Markup(raw)
    return PlainText(raw)
