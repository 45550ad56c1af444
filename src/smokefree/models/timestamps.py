"""
Timestamp normalisation for every persisted model.

The tracker works in naive local time: the store's clock is datetime.now
and calendar days are local days. Timestamps arriving with an offset
(`...Z`, `+03:00`) are converted to local time and stripped of their zone
at validation, so naive and aware values never meet in a comparison.
"""
from datetime import datetime
from typing import Optional


def local_naive(moment: Optional[datetime]) -> Optional[datetime]:
    """moment as naive local time. Naive values and None pass through unchanged."""
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)
