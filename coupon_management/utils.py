import math
from datetime import date, datetime, time, timezone
from typing import Any, Optional


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a quantity here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def coerce_number(value: Any) -> float:
    """
    Best-effort numeric conversion for cart fields.

    Missing, non-numeric and unparseable values become 0.0 so that a
    malformed cart degrades to an empty one instead of failing a request.
    """
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
        return number if math.isfinite(number) else 0.0
    return 0.0


def parse_datetime_safe(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp into a timezone-aware UTC datetime.

    Accepts datetimes, dates (midnight UTC) and ISO-8601 strings, with or
    without a trailing ``Z``. Naive values are taken to be UTC.

    Returns:
        The normalized datetime, or None when the value cannot be parsed.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
