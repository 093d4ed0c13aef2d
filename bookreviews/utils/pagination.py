"""Offset pagination arithmetic."""

import math


def page_offset(page: int, page_size: int) -> int:
    """
    Number of rows to skip for a 1-indexed page.

    Page 1 → skip 0 rows, page 2 → skip page_size rows, and so on.
    """
    return (page - 1) * page_size


def total_pages(total: int, page_size: int) -> int:
    """Pages needed to show `total` rows, 0 when there are none."""
    return math.ceil(total / page_size) if total > 0 else 0
