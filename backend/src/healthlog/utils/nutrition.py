from __future__ import annotations

from typing import Iterable, Optional

from healthlog.models import DayMeals, LoggedFood


def sum_kcal(items: Iterable[LoggedFood]) -> float:
    """Plain kcal sum; ``quantity`` is not factored in (legacy totals never did)."""
    total = 0.0
    for it in items:
        total += float(it.kcal or 0.0)
    return total


def day_total_kcal(day: Optional[DayMeals]) -> float:
    if day is None:
        return 0.0
    return sum_kcal(day.iter_items())
