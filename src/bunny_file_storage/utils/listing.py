"""Directory listing helpers shared by all backends.

None of the storage backends page their directory listings natively, so
pagination is done client side: the full listing is fetched once and sliced
at an offset. The offset is handed to callers as an opaque cursor (the
decimal string of the index of the next entry).
"""

import re
from collections.abc import Sequence
from dataclasses import replace
from typing import Any, TypeVar

from bunny_file_storage.exceptions import InputValidationError
from bunny_file_storage.protocols.file_storage import ListOptions

T = TypeVar("T")

# Longer cursors cannot address a real listing and overflow int() parsing
MAX_CURSOR_DIGITS = 18
CURSOR_RE = re.compile(rf"[0-9]{{1,{MAX_CURSOR_DIGITS}}}")


def validate_limit(limit: object) -> int | None:
    """Validate a page size.

    Raises:
        InputValidationError: If limit is not a positive integer
    """
    if limit is None:
        return None
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InputValidationError(f"Invalid limit: expected a positive integer, got {limit!r}")
    return limit


def validate_cursor(cursor: object) -> str | None:
    """Validate a cursor returned by a previous listing.

    Raises:
        InputValidationError: If cursor is not a non-negative decimal string of at
            most MAX_CURSOR_DIGITS digits
    """
    if cursor is None:
        return None
    if not isinstance(cursor, str) or not CURSOR_RE.fullmatch(cursor):
        raise InputValidationError(f"Invalid cursor: {cursor!r}")
    return cursor


def resolve_list_options(options: ListOptions | None = None, **overrides: Any) -> ListOptions:
    """Merge keyword overrides into list options."""
    if options is None:
        return ListOptions(**overrides)
    return replace(options, **overrides) if overrides else options


def validate_list_options(options: ListOptions) -> ListOptions:
    """Validate the caller supplied parts of the list options."""
    validate_limit(options.limit)
    validate_cursor(options.cursor)
    return options


def normalize_prefix(prefix: str | None) -> str:
    """Make sure a directory prefix ends with a slash."""
    if not prefix:
        return "/"
    return prefix if prefix.endswith("/") else f"{prefix}/"


def paginate(
    entries: Sequence[T],
    limit: int | None = None,
    cursor: str | None = None,
) -> tuple[list[T], str | None]:
    """Slice one page out of a fully fetched listing.

    Args:
        entries: The complete, already filtered listing
        limit: Maximum number of entries in the page (all remaining if None)
        cursor: Offset of the first entry, as returned by a previous call

    Returns:
        Tuple of (page entries, cursor of the next page or None)
    """
    start = int(cursor) if cursor is not None else 0
    end = len(entries) if limit is None else start + limit

    page = list(entries[start:end])
    next_cursor = str(end) if end < len(entries) else None
    return page, next_cursor
