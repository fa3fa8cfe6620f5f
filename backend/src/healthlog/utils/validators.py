from __future__ import annotations

import re
from datetime import date, datetime

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MAX_WEIGHT = 1000.0


def is_iso_date(value: str) -> bool:
    """True for real calendar dates written as YYYY-MM-DD."""
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def local_today() -> str:
    # Server-local calendar day, not UTC.
    return date.today().isoformat()


def round_weight(weight: float) -> float:
    return round(float(weight), 1)
