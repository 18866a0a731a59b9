# barbershop/core.py

from datetime import datetime


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """True if [a_start, a_end) intersects [b_start, b_end). Touching ends don't count."""
    return a_start < b_end and a_end > b_start
