from datetime import datetime
from typing import Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import MEAL_SLOTS, MealSlot


class FoodSnapshot(BaseModel):
    """Food definition as it was when an item was logged."""

    model_config = ConfigDict(frozen=True)

    name: str
    unit: str
    kcal: float


class LoggedFood(BaseModel):
    id: int
    name: str
    unit: str
    kcal: float
    quantity: float = 1


class DayMeals(BaseModel):
    """One meal record with its items split into the six slot buckets."""

    id: int
    date: str
    total_kcal: float = 0.0
    updated_at: Optional[datetime] = None

    breakfast: List[LoggedFood] = Field(default_factory=list)
    morning_snack: List[LoggedFood] = Field(default_factory=list)
    lunch: List[LoggedFood] = Field(default_factory=list)
    afternoon_snack: List[LoggedFood] = Field(default_factory=list)
    dinner: List[LoggedFood] = Field(default_factory=list)
    evening_snack: List[LoggedFood] = Field(default_factory=list)

    def slot(self, slot: Union[MealSlot, str]) -> List[LoggedFood]:
        return getattr(self, MealSlot(slot).value)

    def iter_items(self) -> Iterator[LoggedFood]:
        for name in MEAL_SLOTS:
            yield from getattr(self, name)


class StaleTotal(BaseModel):
    date: str
    cached: float
    actual: float
