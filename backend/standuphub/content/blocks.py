"""Block structure for report content.

Plain text reports use ad-hoc list markers (``1.``, ``-``, ``*``, ``•``, ``→``,
``[ ]``) that get turned into ``<ol>``/``<ul>``/``<p>`` markup here. Content that
is already block markup only gets its blank lines tidied.
"""

import re
from typing import List, Optional

import bleach

BLOCK_TAG_PATTERN = re.compile(
    r"<\s*(p|div|ul|ol|li|h[1-6]|blockquote|pre|table)(\s[^>]*)?/?>",
    re.IGNORECASE,
)

LINE_BREAK_PATTERN = re.compile(r"<br\s*/?>", re.IGNORECASE)

# A list marker sitting after other text on the same line
INLINE_MARKER_PATTERN = re.compile(r"(?<=\S)[ \t]+(?=(?:\d+[.)]|[-*•→])[ \t])")

ORDERED_ITEM_PATTERN = re.compile(r"^(\d+)[.)]\s+(.+)$")
BULLET_ITEM_PATTERN = re.compile(r"^[-*•→]\s+(.+)$")
CHECKBOX_ITEM_PATTERN = re.compile(r"^\[[ xX]?\]\s+(.+)$")

EMPTY_PARAGRAPH_PATTERN = re.compile(r"<p(\s[^>]*)?>\s*</p>", re.IGNORECASE)
BREAK_RUN_PATTERN = re.compile(r"(?:<br\s*/?>\s*){3,}", re.IGNORECASE)

ALLOWED_TAGS = frozenset({
    "p", "div", "br", "hr", "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "blockquote", "pre", "code",
    "table", "thead", "tbody", "tr", "th", "td",
    "strong", "b", "em", "i", "u", "s", "a", "span", "img",
})

ALLOWED_ATTRIBUTES = {
    "*": ["class", "title"],
    "span": ["class", "title", "data-task-id", "data-user-id", "data-id"],
    "a": ["class", "title", "href"],
    "img": ["class", "title", "src", "alt"],
}

ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto"})

_LIST_TAGS = {"ordered": "ol", "unordered": "ul"}


def has_block_markup(text: str) -> bool:
    """Check whether content already contains block-level tags."""
    return bool(text) and BLOCK_TAG_PATTERN.search(text) is not None


def split_lines(text: str) -> List[str]:
    """Split on newlines and ``<br>`` markers."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return LINE_BREAK_PATTERN.sub("\n", text).split("\n")


def plain_text_to_blocks(text: str) -> str:
    """Convert plain text with list markers into block markup.

    List items are numbered by position: ``5. a`` followed by ``7. b`` becomes
    the first and second item of an ``<ol>``. Checkbox state is dropped. Lines
    are not escaped here; the caller passes text that is already safe.
    """
    if not text:
        return ""

    text = INLINE_MARKER_PATTERN.sub("\n", text)

    blocks: List[str] = []
    items: List[str] = []
    list_type: Optional[str] = None

    def close_list() -> None:
        nonlocal list_type
        if list_type is not None:
            tag = _LIST_TAGS[list_type]
            blocks.append(f"<{tag}>" + "".join(f"<li>{item}</li>" for item in items) + f"</{tag}>")
            items.clear()
            list_type = None

    def add_item(kind: str, content: str) -> None:
        nonlocal list_type
        if list_type != kind:
            close_list()
            list_type = kind
        items.append(content.strip())

    for raw_line in split_lines(text):
        line = raw_line.strip()
        if not line:
            close_list()
            continue

        ordered = ORDERED_ITEM_PATTERN.match(line)
        if ordered:
            add_item("ordered", ordered.group(2))
            continue

        bullet = BULLET_ITEM_PATTERN.match(line) or CHECKBOX_ITEM_PATTERN.match(line)
        if bullet:
            add_item("unordered", bullet.group(1))
            continue

        close_list()
        blocks.append(f"<p>{line}</p>")

    close_list()
    return "".join(blocks)


def normalize_markup(html: str) -> str:
    """Keep empty paragraphs visible and stop blank lines piling up.

    ``<p></p>`` becomes ``<p><br></p>`` and three or more consecutive ``<br>``
    collapse to two.
    """
    if not html:
        return ""
    html = EMPTY_PARAGRAPH_PATTERN.sub(lambda m: f"<p{m.group(1) or ''}><br></p>", html)
    return BREAK_RUN_PATTERN.sub("<br><br>", html)


def sanitize_markup(html: str) -> str:
    """Reduce editor markup to the tags and attributes reports use.

    Scripts, event handlers and ``javascript:`` links are dropped; disallowed
    tags are stripped and their text kept.
    """
    if not html:
        return ""
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )
