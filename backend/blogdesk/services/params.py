"""
Blogdesk Backend: Query Parameter Helpers
===========================================

What:  Lenient page/limit parsing, page-count math and id parsing shared by
       the blog and category services.

Pagination contract:
    page, limit   leading integer ("2.5" → 2, "3abc" → 3); none or < 1 → default
                  limit capped only when MAX_PAGE_SIZE is set
    offset        (page - 1) * limit
    totalPages    ceil(total / limit)
"""

import math
import re
import uuid
from typing import Any, Optional, Tuple

from blogdesk.config import settings

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _positive_int(raw: Any, default: int) -> int:
    if raw is None:
        return default
    match = _LEADING_INT.match(str(raw))
    if not match:
        return default
    value = int(match.group(1))
    return value if value >= 1 else default


def parse_page_params(page: Any = None, limit: Any = None) -> Tuple[int, int]:
    """Returns (page, limit) from raw query values."""
    page_num = _positive_int(page, 1)
    limit_num = _positive_int(limit, settings.default_page_size)
    if settings.max_page_size is not None:
        limit_num = min(limit_num, settings.max_page_size)
    return page_num, limit_num


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def parse_uuid(value: Any) -> Optional[uuid.UUID]:
    """UUID for well-formed ids, None otherwise (callers turn that into 404)."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None
