from datetime import datetime, timedelta

from mathgame.models import utcnow
from .errors import ValidationError

TIMEFRAMES = ('all', 'today', 'week', 'month')
TRAILING_DAYS = {'week': 7, 'month': 30}


def window_bounds(timeframe: str, now: datetime = None):
    """Return ``(start, end)`` for a named window; either side may be None (open).

    ``today`` is the current UTC calendar date; ``week`` and ``month`` are the
    trailing 7 and 30 days from ``now``.
    """
    if timeframe not in TIMEFRAMES:
        raise ValidationError(f"timeframe must be one of {', '.join(TIMEFRAMES)}")
    now = now or utcnow()
    if timeframe == 'today':
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return start, start + timedelta(days=1)
    if timeframe in TRAILING_DAYS:
        return now - timedelta(days=TRAILING_DAYS[timeframe]), None
    return None, None


def apply_window(query, column, timeframe: str, now: datetime = None):
    start, end = window_bounds(timeframe, now)
    if start is not None:
        query = query.filter(column >= start)
    if end is not None:
        query = query.filter(column < end)
    return query
