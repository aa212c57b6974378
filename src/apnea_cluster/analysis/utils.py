"""Analysis utility functions."""

from bisect import bisect_left
from datetime import datetime


def seconds_between(earlier: datetime, later: datetime) -> float:
    """Signed distance in seconds from earlier to later."""
    return (later - earlier).total_seconds()


def has_timestamp_between(
    times: list[datetime],
    low: datetime,
    high: datetime,
    padding_sec: float = 0.0,
) -> bool:
    """
    Check whether any timestamp in a sorted list lies in a padded window.

    The window is [low - padding_sec, high + padding_sec], inclusive. The
    padding is compared in float seconds, so it may be arbitrarily large or
    infinite.

    Args:
        times: Timestamps sorted ascending
        low: Window start before padding
        high: Window end before padding
        padding_sec: Seconds added on both sides

    Returns:
        True if at least one timestamp falls inside the window
    """
    index = bisect_left(
        times, -padding_sec, key=lambda moment: seconds_between(low, moment)
    )
    return index < len(times) and seconds_between(high, times[index]) <= padding_sec
