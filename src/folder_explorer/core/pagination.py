"""Cursor codec and page assembly for id-ordered listings.

A cursor is the base64 encoding of the decimal id of the last item on the
previous page. Clients must treat it as opaque.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Sequence

from folder_explorer.models import MAX_NODE_ID, CursorInfo, CursorPage, HierarchyNode

logger = logging.getLogger(__name__)


def encode_cursor(last_id: int) -> str:
    return base64.b64encode(str(last_id).encode()).decode()


def decode_cursor(cursor: str | None) -> int | None:
    """Decode a cursor into the id to resume after.

    Malformed, non-numeric or out-of-range cursors decode to ``None`` (start of
    sequence).
    """
    if not cursor:
        return None
    try:
        raw = base64.b64decode(cursor.encode(), validate=True).decode()
        value = int(raw)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        logger.debug("ignoring malformed cursor %r", cursor)
        return None
    return value if 0 <= value <= MAX_NODE_ID else None


def clamp_limit(limit: int | None, default: int, maximum: int) -> int:
    if limit is None:
        return default
    return max(1, min(int(limit), maximum))


def build_cursor_page(rows: Sequence[HierarchyNode], limit: int) -> CursorPage:
    """Turn a ``limit + 1`` fetch into a page: the extra row only signals ``has_more``."""
    has_more = len(rows) > limit
    data = list(rows[:limit])
    next_cursor = encode_cursor(data[-1].id) if has_more and data else None
    return CursorPage(data=data, cursor=CursorInfo(next=next_cursor, has_more=has_more))


def empty_cursor_page() -> CursorPage:
    return CursorPage(data=[], cursor=CursorInfo(next=None, has_more=False))
