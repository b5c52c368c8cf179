"""Formatting utilities for display."""


def format_duration(seconds: float) -> str:
    """Format seconds as H:MM:SS, or M:SS under an hour."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_percent(fraction: float, decimals: int = 1) -> str:
    """Format a fraction (0.05) as a percentage string (5.0%)."""
    return f"{fraction * 100:.{decimals}f}%"
