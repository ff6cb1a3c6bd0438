"""
UTC timestamp utilities for isp-pricing-verifier.

All timestamps are UTC with an explicit 'Z' marker. Run identifiers are
filesystem-safe slugs of the run start time, so output directories sort
chronologically.

This module provides:
- utc_now(): Current time as timezone-aware datetime
- utc_timestamp(): ISO 8601 timestamp string with 'Z' suffix
- run_id_from_timestamp(): Filesystem-safe timestamp slug for run IDs
- format_duration(): Human-readable scenario duration

Examples:
    >>> utc_timestamp()
    '2025-06-12T08:30:45Z'
    >>> run_id_from_timestamp()
    '2025-06-12T08-30-45Z'
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return current time in UTC with timezone info.

    Note:
        NEVER use datetime.now() without a timezone or datetime.utcnow().
    """
    return datetime.now(UTC)


def utc_timestamp() -> str:
    """
    Return ISO 8601 timestamp string with 'Z' suffix.

    Format: YYYY-MM-DDTHH:MM:SSZ

    Used for scenario result files, run metadata and structured logs.
    """
    return utc_now().strftime("%Y-%m-%dT%H:%M:%SZ")


def run_id_from_timestamp(dt: datetime | None = None) -> str:
    """
    Generate run_id slug from UTC timestamp.

    Format: YYYY-MM-DDTHH-MM-SSZ (hyphens instead of colons so the slug is a
    valid directory name on every platform).

    Args:
        dt: Optional datetime to convert. If None, uses utc_now().
            Must be timezone-aware if provided.

    Returns:
        str: Filesystem-safe timestamp slug

    Raises:
        ValueError: If dt is provided but is naive (missing timezone)

    Examples:
        >>> from datetime import datetime, timezone
        >>> run_id_from_timestamp(datetime(2025, 6, 12, 8, 30, 45, tzinfo=timezone.utc))
        '2025-06-12T08-30-45Z'
    """
    if dt is None:
        dt = utc_now()

    if dt.tzinfo is None:
        raise ValueError(
            "Datetime must be timezone-aware (use timezone.utc). "
            "Got naive datetime. Use utc_now() or ensure dt has tzinfo set."
        )

    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H-%M-%SZ")


def format_duration(seconds: float) -> str:
    """
    Format a scenario duration for console and report output.

    Examples:
        >>> format_duration(4.2)
        '4.2s'
        >>> format_duration(95)
        '1m 35s'
    """
    if seconds < 0:
        raise ValueError(f"Duration cannot be negative, got: {seconds}")

    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}m {secs}s"
