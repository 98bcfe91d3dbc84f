"""TipTap content utilities.

Functions for working with TipTap rich text JSON format.
"""

import json
from typing import Any


def load_document(value: str | dict | None) -> dict | str | None:
    """Load a TipTap document that may arrive as a dict or a JSON string.

    Args:
        value: TipTap JSON as a dict or JSON string, or plain text

    Returns:
        The document dict, the original string when it is not JSON, or None
    """
    if value is None:
        return None
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("{"):
            try:
                loaded = json.loads(stripped)
            except json.JSONDecodeError:
                return value
            if isinstance(loaded, dict):
                return loaded
        return value
    return None


def node_type(node: Any) -> str:
    """Get the type of a TipTap node, or an empty string for non-nodes."""
    if isinstance(node, dict):
        value = node.get("type")
        return value if isinstance(value, str) else ""
    return ""


def node_attrs(node: Any) -> dict:
    """Get the attrs of a TipTap node, always as a dict."""
    if isinstance(node, dict) and isinstance(node.get("attrs"), dict):
        return node["attrs"]
    return {}


def node_children(node: Any) -> list:
    """Get the child nodes of a TipTap node, always as a list."""
    if isinstance(node, dict) and isinstance(node.get("content"), list):
        return node["content"]
    return []


def class_names(node: Any) -> set[str]:
    """Get the CSS classes recorded on a node's attrs.

    Older editor builds stored chips with only a class marker, under either
    ``class`` or ``className``.
    """
    attrs = node_attrs(node)
    value = attrs.get("class") or attrs.get("className") or ""
    if not isinstance(value, str):
        return set()
    return set(value.split())
