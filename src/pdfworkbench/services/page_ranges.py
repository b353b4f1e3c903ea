"""
PDF Workbench - Page Range Parser

Turns user text such as ``"1-3, 7, 10-12"`` into a sorted, duplicate-free
list of 1-based page numbers. Parsing is deliberately lenient: tokens that
are not one or two integers are dropped without an error, and no bounds
are checked here. Bounds are applied against a concrete document with
``resolve_page_indices``.
"""

import re

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _leading_int(text: str) -> int | None:
    """Parse the integer at the start of *text*, ignoring any trailing junk.

    ``"12"`` and ``" 12abc"`` both give 12; ``"abc"`` and ``""`` give None.
    """
    match = _LEADING_INT.match(text)
    if match is None:
        return None
    return int(match.group(1))


def parse_page_range(expression: str) -> list[int]:
    """Parse a page range expression into a sorted list of page numbers.

    Supports: "3", "1-5", "5-1", "1,3,7", "1-3,7,10-12".

    Args:
        expression: Page range text such as "1-3,7".

    Returns:
        Ascending list of page ordinals without duplicates. An empty or
        whitespace-only expression gives an empty list.
    """
    if not expression or not expression.strip():
        return []

    pages: set[int] = set()
    for part in expression.split(","):
        bounds = part.strip().split("-")
        if len(bounds) == 2:
            start = _leading_int(bounds[0])
            end = _leading_int(bounds[1])
            if start is not None and end is not None:
                pages.update(range(min(start, end), max(start, end) + 1))
        else:
            value = _leading_int(part)
            if value is not None:
                pages.add(value)

    return sorted(pages)


def resolve_page_indices(ordinals: list[int], page_count: int) -> list[int]:
    """Map 1-based ordinals to 0-based indices, dropping out-of-range values.

    Args:
        ordinals: Page ordinals, typically from ``parse_page_range``.
        page_count: Number of pages in the target document.

    Returns:
        0-based page indices in the order given.
    """
    return [p - 1 for p in ordinals if 1 <= p <= page_count]
