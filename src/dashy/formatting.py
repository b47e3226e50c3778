"""Formatting utilities for the dashboard and CLI output."""

_UNITS = (
    ("GB", 1024**3),
    ("MB", 1024**2),
    ("KB", 1024),
)


def format_bytes(size: int) -> str:
    """Format a byte count as a human-readable string.

    Picks the largest unit whose threshold the value meets:
    - below 1024: "512 B"
    - otherwise: two decimals, e.g. "1.50 KB", "1.00 GB"
    """
    for unit, threshold in _UNITS:
        if size >= threshold:
            return f"{size / threshold:.2f} {unit}"
    return f"{size} B"


def format_rate(size: int) -> str:
    """Format a per-interval byte count as a rate."""
    return f"{format_bytes(size)}/s"


def format_gigabytes(size: int) -> str:
    """Format bytes as gigabytes with one decimal (memory gauge label)."""
    return f"{size / 1024**3:.1f} GB"
