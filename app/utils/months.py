import datetime as dt
import re
from typing import Tuple

from app.core.exceptions import InvalidRequestError

_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


def month_window(month: str) -> Tuple[dt.date, dt.date]:
    """
    "YYYY-MM" -> (first day of that month, first day of the next month).
    The window is inclusive at the start and exclusive at the end.
    """
    match = _MONTH_RE.match(month.strip()) if month else None
    if not match:
        raise InvalidRequestError("Invalid month", details="Expected YYYY-MM")
    year, mon = int(match.group(1)), int(match.group(2))
    if not 1 <= mon <= 12:
        raise InvalidRequestError("Invalid month", details="Month must be between 01 and 12")

    start = dt.date(year, mon, 1)
    end = dt.date(year + 1, 1, 1) if mon == 12 else dt.date(year, mon + 1, 1)
    return start, end


def in_window(value: dt.date, window: Tuple[dt.date, dt.date]) -> bool:
    start, end = window
    return start <= value < end
