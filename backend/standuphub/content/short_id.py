"""Short task ids.

A short id is the first 6 hex digits of a UUID read as a base-16 number and
written in base 10:

    UUID:      bbeceefb-5ab1-471b-b531-63addc51d41b
    Prefix:    bbecee
    Short ID:  12315886

Decoding only recovers the prefix. Turning it back into a full id means
searching the store for an id starting with that prefix, and two ids can share
a prefix. That is accepted for display purposes.

All functions here are total: bad input gives an empty or false result.
"""

import re

SHORT_ID_PREFIX_LENGTH = 6

FULL_ID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_HEX_PREFIX = re.compile(r"[0-9a-fA-F]{6}")
_SHORT_FORM = re.compile(r"[0-9]+")


def encode_short_id(full_id: str) -> str:
    """Convert a full id into its decimal short id."""
    if not full_id or not isinstance(full_id, str):
        return ""
    match = _HEX_PREFIX.match(full_id.replace("-", ""))
    if not match:
        return ""
    return str(int(match.group(), 16))


def decode_short_id(short_id: str) -> str:
    """Convert a short id back into the lowercase hex prefix of its full id."""
    if not short_id or not isinstance(short_id, str):
        return ""
    short_id = short_id.strip()
    if not _SHORT_FORM.fullmatch(short_id):
        return ""
    return format(int(short_id), "x").rjust(SHORT_ID_PREFIX_LENGTH, "0")


def is_short_form(token: str) -> bool:
    """Check whether an id string is a short id rather than a full id."""
    if not token or not isinstance(token, str):
        return False
    return bool(_SHORT_FORM.fullmatch(token)) and len(token) < 15


def looks_like_full_id(token: str) -> bool:
    """Check whether an id string has the 36 character UUID shape."""
    if not token or not isinstance(token, str):
        return False
    return bool(FULL_ID_PATTERN.fullmatch(token))


def matches_short_id(full_id: str, short_id: str) -> bool:
    """Check whether a full id starts with the prefix a short id decodes to."""
    prefix = decode_short_id(short_id)
    if not prefix:
        return False
    return str(full_id).replace("-", "").lower().startswith(prefix)
