"""Meal ledger: one record per calendar day plus the items logged under it.

``meals.total_kcal`` caches the kcal sum of the day's items. Writing items
never touches it; after ``add_item``, ``update_item`` or ``delete_item`` the
caller re-reads the day and stores the new sum, either through
:meth:`MealLedger.recompute_total` or by computing it and calling
:meth:`MealLedger.set_day_total` directly.
"""
from __future__ import annotations

import math
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from sqlalchemy import delete, update
from sqlmodel import Session, select

from healthlog.core.database import Database
from healthlog.core.errors import InvariantBreach, MalformedDocument
from healthlog.models import (
    MEAL_SLOTS,
    DayMeals,
    FoodUnit,
    LoggedFood,
    MealItem,
    MealRecord,
    MealSlot,
    StaleTotal,
    enum_value,
)
from healthlog.utils.nutrition import day_total_kcal


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _items_in_day_order():
    # Ids grow with every insert, so they order a slot by insertion.
    return (MealItem.meal_category, MealItem.id)


def _to_day(record: MealRecord, items: Sequence[MealItem]) -> DayMeals:
    buckets: Dict[str, List[LoggedFood]] = {name: [] for name in MEAL_SLOTS}
    for item in items:
        bucket = buckets.get(item.meal_category)
        if bucket is None:
            raise InvariantBreach(
                f"meal item {item.id} on {record.date} has unknown slot {item.meal_category!r}"
            )
        bucket.append(item.to_logged())
    return DayMeals(
        id=record.id,
        date=record.date,
        total_kcal=record.total_kcal,
        updated_at=record.updated_at,
        **buckets,
    )


def _legacy_total(day: Mapping[str, Any]) -> float:
    total = 0.0
    for slot in MEAL_SLOTS:
        entries = day.get(slot)
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            try:
                total += float(entry.get("kcal") or 0.0)
            except (TypeError, ValueError) as exc:
                raise MalformedDocument(
                    f"{day.get('date')}.{slot}: kcal {entry.get('kcal')!r} is not a number"
                ) from exc
    return total


class MealLedger:
    def __init__(self, db: Database) -> None:
        self.db = db

    # --- reads -----------------------------------------------------------

    def get_day(self, date: str) -> Optional[DayMeals]:
        """The day's record with its slot buckets, or ``None`` if nothing was logged yet."""
        with self.db.session() as session:
            record = session.exec(select(MealRecord).where(MealRecord.date == date)).first()
            if record is None:
                return None
            return self._load_day(session, record)

    def get_day_by_id(self, meal_id: int) -> Optional[DayMeals]:
        with self.db.session() as session:
            record = session.get(MealRecord, meal_id)
            if record is None:
                return None
            return self._load_day(session, record)

    def list_all_days(self) -> List[DayMeals]:
        """Every day, newest first."""
        with self.db.session() as session:
            records = session.exec(select(MealRecord).order_by(MealRecord.date.desc())).all()
            items = session.exec(select(MealItem).order_by(*_items_in_day_order())).all()

        by_meal: Dict[int, List[MealItem]] = defaultdict(list)
        for item in items:
            by_meal[item.meal_id].append(item)
        return [_to_day(record, by_meal.get(record.id, [])) for record in records]

    def _load_day(self, session: Session, record: MealRecord) -> DayMeals:
        stmt = (
            select(MealItem)
            .where(MealItem.meal_id == record.id)
            .order_by(*_items_in_day_order())
        )
        return _to_day(record, session.exec(stmt).all())

    # --- single-row writes ---------------------------------------------

    def create_day(self, date: str, initial_total: float = 0) -> int:
        """Insert the record for ``date``; a second record for the same date is a ConstraintViolation."""
        record = MealRecord(date=date, total_kcal=initial_total)
        with self.db.session() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
        return record.id

    def set_day_total(self, meal_id: int, total: float) -> bool:
        with self.db.session() as session:
            result = session.execute(
                update(MealRecord)
                .where(MealRecord.id == meal_id)
                .values(total_kcal=total, updated_at=_now())
            )
            session.commit()
        return result.rowcount > 0

    def add_item(
        self,
        meal_id: int,
        name: str,
        unit: Union[FoodUnit, str],
        kcal: float,
        slot: Union[MealSlot, str],
        quantity: float = 1,
    ) -> int:
        item = MealItem(
            meal_id=meal_id,
            food_item_name=name,
            food_item_unit=enum_value(unit),
            food_item_kcal=kcal,
            meal_category=MealSlot(slot).value,
            quantity=quantity,
        )
        with self.db.session() as session:
            session.add(item)
            session.commit()
            session.refresh(item)
        return item.id

    def update_item(
        self,
        meal_id: int,
        item_id: int,
        name: Optional[str] = None,
        unit: Union[FoodUnit, str, None] = None,
        kcal: Optional[float] = None,
    ) -> Optional[LoggedFood]:
        """Patch an item of the given day; ``None`` when the day has no such item."""
        with self.db.session() as session:
            stmt = select(MealItem).where(MealItem.id == item_id, MealItem.meal_id == meal_id)
            item = session.exec(stmt).first()
            if item is None:
                return None
            if name is not None:
                item.food_item_name = name
            if unit is not None:
                item.food_item_unit = enum_value(unit)
            if kcal is not None:
                item.food_item_kcal = kcal
            session.add(item)
            session.commit()
            session.refresh(item)
            return item.to_logged()

    def delete_item(self, meal_id: int, item_id: int) -> bool:
        with self.db.session() as session:
            result = session.execute(
                delete(MealItem).where(MealItem.id == item_id, MealItem.meal_id == meal_id)
            )
            session.commit()
        return result.rowcount > 0

    # --- cached total ----------------------------------------------------

    def recompute_total(self, meal_id: int) -> Optional[float]:
        """Re-read the day, sum its items and store the sum as the cached total.

        Returns ``None`` when there is no day with ``meal_id``.
        """
        day = self.get_day_by_id(meal_id)
        if day is None:
            return None
        total = day_total_kcal(day)
        self.set_day_total(meal_id, total)
        return total

    def stale_totals(self) -> List[StaleTotal]:
        stale = []
        for day in self.list_all_days():
            actual = day_total_kcal(day)
            if not math.isclose(day.total_kcal, actual, abs_tol=1e-6):
                stale.append(StaleTotal(date=day.date, cached=day.total_kcal, actual=actual))
        return stale

    def assert_totals_consistent(self) -> None:
        stale = self.stale_totals()
        if stale:
            details = ", ".join(f"{s.date} (cached {s.cached}, items {s.actual})" for s in stale)
            raise InvariantBreach(f"cached day totals out of date: {details}")

    # --- bulk replace ------------------------------------------------------

    def replace_all(self, days: Iterable[Mapping[str, Any]]) -> None:
        self.db.run_atomic(lambda session: self.replace_in(session, days))

    def replace_in(self, session: Session, days: Iterable[Mapping[str, Any]]) -> None:
        """Drop every day and item, then insert ``days`` (legacy document entries).

        Slots missing from an entry, or not holding a list, are skipped. A
        missing ``totalKcal`` is rebuilt from the entry's items.
        """
        session.execute(delete(MealItem))
        session.execute(delete(MealRecord))

        for position, day in enumerate(days):
            if not isinstance(day, Mapping):
                raise MalformedDocument(
                    f"meals[{position}] must be an object, got {type(day).__name__}"
                )
            total = day.get("totalKcal")
            record = MealRecord(
                date=day.get("date"),
                total_kcal=_legacy_total(day) if total is None else total,
            )
            session.add(record)
            session.flush()

            for slot in MEAL_SLOTS:
                entries = day.get(slot)
                if not isinstance(entries, list):
                    continue
                for entry in entries:
                    if not isinstance(entry, Mapping):
                        raise MalformedDocument(
                            f"meals[{position}].{slot} entries must be objects"
                        )
                    quantity = entry.get("quantity")
                    session.add(
                        MealItem(
                            meal_id=record.id,
                            food_item_name=entry.get("name"),
                            food_item_unit=enum_value(entry.get("unit")),
                            food_item_kcal=entry.get("kcal"),
                            meal_category=slot,
                            quantity=1 if quantity is None else quantity,
                        )
                    )
            session.flush()
