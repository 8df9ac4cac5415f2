"""Human-readable byte sizes and quota summaries."""

from config.constants import QuotaSentinel
from sync.models import UserQuota

_UNITS = ["bytes", "KB", "MB", "GB", "TB", "PB"]


def format_bytes(value: int | float | None) -> str:
    """Format a byte count, e.g. ``1536 -> "1.50 KB"``."""
    if value is None:
        return "N/A"
    if value == 0:
        return "0 bytes"
    size = float(value)
    i = 0
    while abs(size) >= 1024 and i < len(_UNITS) - 1:
        size /= 1024.0
        i += 1
    if i == 0:
        return f"{int(size)} bytes"
    return f"{size:.2f} {_UNITS[i]}"


def format_percent(value: float | None, decimals: int = 2) -> str:
    if value is None:
        return "N/A"
    return f"{value:.{decimals}f}%"


def format_quota(quota: UserQuota | None) -> str:
    """Summarize a quota snapshot, naming the server's sentinel states."""
    if quota is None:
        return "quota unknown"
    if quota.available < 0:
        try:
            state = QuotaSentinel(quota.available).name.lower()
        except ValueError:
            state = "unknown"
        return f"{format_bytes(quota.used)} used ({state} quota)"
    return (
        f"{format_bytes(quota.used)} of {format_bytes(quota.total)} used "
        f"({format_percent(quota.relative)})"
    )
