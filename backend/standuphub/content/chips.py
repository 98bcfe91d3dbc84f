"""Chip markup for task and user references.

Chips are the inline, clickable elements a reference renders as. The client
finds them by their ``data-task-id`` / ``data-user-id`` attributes. Every
value interpolated here is HTML-escaped.
"""

from html import escape
from typing import Literal, Optional

from standuphub.content.short_id import encode_short_id, looks_like_full_id

RenderMode = Literal["view", "editor"]

DEFAULT_TITLE_MAX_LENGTH = 30
ELLIPSIS = "..."
FALLBACK_USER_NAME = "User"

TASK_CHIP_CLASSES = {
    "view": "task-ref text-indigo-600 font-medium cursor-pointer hover:underline decoration-indigo-300 underline-offset-2",
    "editor": "task-ref text-indigo-600 font-medium cursor-pointer hover:underline",
}
USER_CHIP_CLASSES = {
    "view": "mention-ref inline-flex items-center gap-1 text-blue-600 font-medium bg-blue-50 px-2 py-0.5 rounded-full cursor-pointer hover:bg-blue-100 transition-colors",
    "editor": "mention-ref text-blue-600 font-medium bg-blue-50 px-1 rounded cursor-pointer",
}


def _attr(value: str) -> str:
    return escape(str(value), quote=True)


def display_short_id(task_id: str) -> str:
    """Short id to show for a task id; ids that are not full ids are shown as written."""
    if looks_like_full_id(task_id):
        return encode_short_id(task_id) or task_id
    return task_id


def truncate_title(title: str, max_length: int = DEFAULT_TITLE_MAX_LENGTH) -> str:
    if len(title) <= max_length:
        return title
    return title[:max_length] + ELLIPSIS


def task_label(task_id: str, title: Optional[str], max_length: int = DEFAULT_TITLE_MAX_LENGTH) -> str:
    """Plain text label of a task chip: ``#<short id>: <title>`` or ``#<short id>``."""
    short_id = display_short_id(task_id)
    if title:
        return f"#{short_id}: {truncate_title(title, max_length)}"
    return f"#{short_id}"


def render_task_chip(
    task_id: str,
    title: Optional[str] = None,
    mode: RenderMode = "view",
    max_length: int = DEFAULT_TITLE_MAX_LENGTH,
) -> str:
    """Render a task reference as a chip.

    Args:
        task_id: Full task id, or the id as written when it did not resolve
        title: Resolved task title, if any
        mode: ``view`` for report pages, ``editor`` for the compact editor style
        max_length: Titles longer than this are cut and get an ellipsis

    Returns:
        Single-line HTML for the chip
    """
    label = task_label(task_id, title, max_length)
    title_attr = f' title="{_attr(title)}"' if title else ""
    return (
        f'<span class="{TASK_CHIP_CLASSES[mode]}" data-task-id="{_attr(task_id)}"{title_attr}>'
        f"{escape(label, quote=False)}</span>"
    )


def render_user_chip(
    user_id: str,
    name: Optional[str] = None,
    avatar_url: Optional[str] = None,
    mode: RenderMode = "view",
) -> str:
    """Render a user mention as a chip.

    Unresolved users show as ``@User``. Without an avatar, view mode shows a
    badge with the first letter of the name instead.
    """
    display_name = name or FALLBACK_USER_NAME
    label = escape(f"@{display_name}", quote=False)
    classes = USER_CHIP_CLASSES[mode]

    if mode == "editor":
        return f'<span class="{classes}" data-user-id="{_attr(user_id)}">{label}</span>'

    if avatar_url:
        avatar = f'<img src="{_attr(avatar_url)}" alt="" class="w-4 h-4 rounded-full" />'
    else:
        initial = (name or "").strip()[:1].upper() or "U"
        avatar = (
            '<span class="mention-avatar inline-flex items-center justify-center w-4 h-4 '
            f'rounded-full bg-blue-500 text-white text-[10px]">{escape(initial, quote=False)}</span>'
        )
    return (
        f'<span class="{classes}" data-user-id="{_attr(user_id)}">'
        f"{avatar}<span>{label}</span></span>"
    )
