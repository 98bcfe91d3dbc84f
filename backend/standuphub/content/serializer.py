"""Flatten an edited TipTap document into the stored plain text form.

This is the inverse of the parser. Chips go back to their canonical tokens
(``#TASK-<id>`` and ``@<id>``), lists to numbered or dashed lines, and
paragraphs to lines. Whatever shape a chip node was saved in by older editor
builds, only the canonical tokens are ever written.
"""

import copy
import re
from typing import Any, Optional

import structlog

from standuphub.content.blocks import INLINE_MARKER_PATTERN
from standuphub.utils.tiptap import class_names, load_document, node_attrs, node_children, node_type

logger = structlog.get_logger()

TASK_NODE_TYPES = {"taskMention", "taskReference", "taskRef"}
USER_NODE_TYPES = {"mention", "userMention"}
TASK_ID_ATTRS = ("taskId", "data-task-id", "data-id")
USER_ID_ATTRS = ("userId", "data-user-id")
TASK_CLASS_MARKERS = {"task-ref", "task-mention"}
USER_CLASS_MARKERS = {"mention-ref"}

ORDERED_LIST_TYPES = {"orderedList"}
UNORDERED_LIST_TYPES = {"bulletList", "taskList"}
LINE_BLOCK_TYPES = {"paragraph", "heading", "blockquote", "codeBlock"}

_NEWLINE_RUN = re.compile(r"\n{3,}")
_ITEM_BREAK = re.compile(r"\s*\n\s*")

# Rendering splits a line at inline list markers such as " - " or " 2. "; a
# no-break space before the marker keeps the line whole
NO_BREAK_SPACE = "\u00a0"


def _first_attr(attrs: dict, names: tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = attrs.get(name)
        if value:
            return str(value)
    return None


def reference_of(node: Any) -> Optional[tuple[str, str]]:
    """Identify a chip node.

    Returns:
        ``("task", id)`` or ``("user", id)`` for chip nodes, None otherwise
    """
    kind = node_type(node)
    attrs = node_attrs(node)

    if kind in USER_NODE_TYPES:
        user_id = _first_attr(attrs, ("id",) + USER_ID_ATTRS)
        return ("user", user_id) if user_id else None
    if kind in TASK_NODE_TYPES:
        task_id = _first_attr(attrs, ("id",) + TASK_ID_ATTRS)
        return ("task", task_id) if task_id else None

    task_id = _first_attr(attrs, TASK_ID_ATTRS)
    if task_id:
        return "task", task_id
    user_id = _first_attr(attrs, USER_ID_ATTRS)
    if user_id:
        return "user", user_id

    classes = class_names(node)
    marker_id = _first_attr(attrs, ("id",))
    if marker_id and classes & TASK_CLASS_MARKERS:
        return "task", marker_id
    if marker_id and classes & USER_CLASS_MARKERS:
        return "user", marker_id
    return None


def _keep_line_whole(text: str) -> str:
    return INLINE_MARKER_PATTERN.sub(NO_BREAK_SPACE, text)


def _item_text(item: Any) -> str:
    return _keep_line_whole(_ITEM_BREAK.sub(" ", _flatten(item)).strip())


def _flatten(node: Any) -> str:
    if isinstance(node, list):
        return "".join(_flatten(child) for child in node)
    if not isinstance(node, dict):
        return ""

    reference = reference_of(node)
    if reference is not None:
        target, ref_id = reference
        return f"#TASK-{ref_id}" if target == "task" else f"@{ref_id}"

    kind = node_type(node)
    if kind == "text":
        text = node.get("text")
        return text if isinstance(text, str) else ""
    if kind == "hardBreak":
        return "\n"
    if kind in ORDERED_LIST_TYPES:
        # Numbered by position; the list's start attribute is ignored
        return "".join(
            f"{index}. {_item_text(item)}\n"
            for index, item in enumerate(node_children(node), start=1)
        )
    if kind in UNORDERED_LIST_TYPES:
        return "".join(f"- {_item_text(item)}\n" for item in node_children(node))
    if kind in LINE_BLOCK_TYPES:
        text = _flatten(node_children(node))
        return f"{_keep_line_whole(text)}\n" if text.strip() else ""

    return _flatten(node_children(node))


def _finish(text: str) -> str:
    return _NEWLINE_RUN.sub("\n\n", text.replace("\r\n", "\n")).strip()


def serialize_for_save(document: Any) -> str:
    """Flatten an editor document into the text that gets stored.

    Args:
        document: TipTap JSON as a dict, a JSON string or a list of nodes.
            A string that is not JSON is taken as already flattened text.

    Returns:
        Plain text with ``#TASK-<id>`` and ``@<id>`` tokens. Never raises;
        a document that cannot be walked gives an empty string.
    """
    if isinstance(document, list):
        document = {"type": "doc", "content": document}

    loaded = load_document(document)
    if loaded is None:
        return ""
    if isinstance(loaded, str):
        return _finish(loaded)

    try:
        text = _flatten(copy.deepcopy(loaded))
    except Exception as exc:
        logger.warning("content_serialize_failed", error=str(exc))
        return ""

    return _finish(text)
