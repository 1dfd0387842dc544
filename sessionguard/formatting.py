"""Human-readable durations for the logout warning."""

from typing import List

_UNITS = (
    (604800, 'week', 'weeks'),
    (86400, 'day', 'days'),
    (3600, 'hour', 'hours'),
    (60, 'minute', 'minutes'),
    (1, 'second', 'seconds'),
)


def seconds_to_human_duration(seconds: int, show_seconds: bool = True) -> str:
    """
    Format a number of seconds as e.g. "1 minute, 30 seconds".
    
    With show_seconds=False the trailing seconds are rounded into minutes.
    """
    seconds = max(int(seconds), 0)
    if not show_seconds:
        seconds = int(round(seconds / 60.0)) * 60

    parts: List[str] = []
    for size, singular, plural in _UNITS:
        count, seconds = divmod(seconds, size)
        if count:
            parts.append(f"{count} {singular if count == 1 else plural}")

    if not parts:
        return '0 seconds' if show_seconds else '0 minutes'
    return ', '.join(parts)
