"""Maps the relational stores to and from the legacy JSON documents.

Meals document::

    {"meals": [{"date", "totalKcal", "breakfast", ..., "evening_snack"}],
     "foodDatabase": [{"name", "unit", "kcal"}]}

Weight document::

    {"weight": {"goal": float, "daily": [{"date", "weight"}]}}

Imports replace everything the document covers inside one transaction, so a
bad document leaves the previous data in place.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping

from sqlmodel import Session

from healthlog.core.database import Database
from healthlog.core.errors import MalformedDocument
from healthlog.models import MEAL_SLOTS, DayMeals, FoodItem, WeightEntry
from healthlog.stores import FoodCatalog, MealLedger, WeightLedger


def _as_list(value: Any, what: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedDocument(f"{what} must be a list, got {type(value).__name__}")
    return value


def _as_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedDocument(f"{what} must be an object, got {type(value).__name__}")
    return value


def food_to_document(food: FoodItem) -> Dict[str, Any]:
    return {"name": food.name, "unit": food.unit, "kcal": food.kcal}


def day_to_document(day: DayMeals) -> Dict[str, Any]:
    doc: Dict[str, Any] = {"date": day.date, "totalKcal": day.total_kcal}
    for slot in MEAL_SLOTS:
        doc[slot] = [item.model_dump() for item in day.slot(slot)]
    return doc


def empty_day_document(date: str) -> Dict[str, Any]:
    doc: Dict[str, Any] = {"date": date, "totalKcal": 0}
    for slot in MEAL_SLOTS:
        doc[slot] = []
    return doc


def entry_to_document(entry: WeightEntry) -> Dict[str, Any]:
    return {"date": entry.date, "weight": entry.weight}


class CompatibilityProjector:
    def __init__(
        self,
        db: Database,
        catalog: FoodCatalog,
        meals: MealLedger,
        weights: WeightLedger,
    ) -> None:
        self.db = db
        self.catalog = catalog
        self.meals = meals
        self.weights = weights

    # --- meals -----------------------------------------------------------

    def export_meals(self) -> Dict[str, Any]:
        return {
            "meals": [day_to_document(day) for day in self.meals.list_all_days()],
            "foodDatabase": [food_to_document(food) for food in self.catalog.list_all()],
        }

    def export_day(self, date: str) -> Dict[str, Any]:
        """Day entry for ``date``; days without a record come back empty."""
        day = self.meals.get_day(date)
        if day is None:
            return empty_day_document(date)
        return day_to_document(day)

    def import_meals(self, doc: Mapping[str, Any]) -> None:
        doc = _as_mapping(doc, "meals document")
        days = _as_list(doc.get("meals"), "meals")
        foods = _as_list(doc.get("foodDatabase"), "foodDatabase")

        def _replace(session: Session) -> None:
            self.meals.replace_in(session, days)
            self.catalog.replace_in(session, foods)

        self.db.run_atomic(_replace)

    # --- weight ----------------------------------------------------------

    def export_weight(self) -> Dict[str, Any]:
        goal = self.weights.get_active_goal()
        return {
            "weight": {
                "goal": goal.goal_weight if goal else 0,
                "daily": [entry_to_document(entry) for entry in self.weights.list_all()],
            }
        }

    def import_weight(self, doc: Mapping[str, Any]) -> None:
        doc = _as_mapping(doc, "weight document")
        weight = _as_mapping(doc.get("weight") or {}, "weight")
        goal = weight.get("goal")
        daily = _as_list(weight.get("daily"), "weight.daily")

        self.db.run_atomic(lambda session: self.weights.replace_in(session, goal, daily))


def build_projector(db: Database) -> CompatibilityProjector:
    return CompatibilityProjector(db, FoodCatalog(db), MealLedger(db), WeightLedger(db))
