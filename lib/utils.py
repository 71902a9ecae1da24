# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Small helpers used by services, routers and workers.
# =============================================================================

import math
from datetime import datetime, timezone
from typing import Any
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Example:
        issuer_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        issuer_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return utc_now().isoformat()


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a timestamp coming back from Postgres.

    PostgREST returns ISO strings, sometimes with a trailing "Z". Naive
    values are treated as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_long_date(value: str | datetime | None) -> str:
    """Format a date like "January 5, 2025"."""
    parsed = parse_timestamp(value) or utc_now()
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


# =============================================================================
# Pagination
# =============================================================================

def build_pagination(page: int, limit: int, total: int) -> dict[str, Any]:
    """Pagination block returned next to list data."""
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }
