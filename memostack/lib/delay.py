"""
Delay input parsing for delayed capture.

Delays are entered as HH:MM. Anything that is not a valid, positive
HH:MM value means "no delay" rather than an error.
"""

from datetime import datetime

from .constants import DELAY_INPUT_PATTERN, EMPTY_DELAY_INPUT

__all__ = ["parse_delay_input", "adjust_delay_input", "format_delay", "format_remaining"]


def parse_delay_input(text: str | None) -> int | None:
    """
    Parse an HH:MM delay into total minutes.

    Returns:
        Minutes of delay, or None for empty, malformed, out-of-range
        (hours >= 24 or minutes >= 60) and zero delays.
    """
    if not text:
        return None
    text = text.strip()
    if text == EMPTY_DELAY_INPUT:
        return None

    match = DELAY_INPUT_PATTERN.match(text)
    if not match:
        return None

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours >= 24 or minutes >= 60:
        return None

    total = hours * 60 + minutes
    return total if total > 0 else None


def format_delay(minutes: int) -> str:
    """Format minutes as HH:MM."""
    minutes = max(minutes, 0)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def adjust_delay_input(text: str | None, delta_minutes: int) -> str:
    """Add a signed delta to the delay in text, clamped at zero.

    Invalid input counts as zero.
    """
    current = parse_delay_input(text) or 0
    return format_delay(current + delta_minutes)


def format_remaining(ready_time: datetime, now: datetime) -> str:
    """Human countdown until ready_time: 'ready', '42s', '5m 3s' or '2h 5m 3s'."""
    total_seconds = int((ready_time - now).total_seconds())
    if total_seconds <= 0:
        return "ready"

    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"
