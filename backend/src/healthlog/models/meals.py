from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Column, ForeignKey, Integer
from sqlmodel import SQLModel, Field, Relationship

from .schemas import FoodSnapshot, LoggedFood


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MealRecord(SQLModel, table=True):
    __tablename__ = "meals"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: str = Field(index=True, unique=True)

    # Cached sum of the items' kcal; rewritten by MealLedger.set_day_total.
    total_kcal: float = 0.0

    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    items: List["MealItem"] = Relationship(
        back_populates="meal",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "passive_deletes": True},
    )


class MealItem(SQLModel, table=True):
    __tablename__ = "meal_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    meal_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("meals.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )

    # Copied from the catalog at log time, not a reference to food_items.
    food_item_name: str
    food_item_unit: str
    food_item_kcal: float

    meal_category: str = Field(index=True)
    quantity: float = Field(default=1, sa_column_kwargs={"server_default": "1"})
    created_at: datetime = Field(default_factory=_now)

    meal: Optional[MealRecord] = Relationship(back_populates="items")

    @property
    def snapshot(self) -> FoodSnapshot:
        return FoodSnapshot(
            name=self.food_item_name,
            unit=self.food_item_unit,
            kcal=self.food_item_kcal,
        )

    def to_logged(self) -> LoggedFood:
        return LoggedFood(
            id=self.id,
            name=self.food_item_name,
            unit=self.food_item_unit,
            kcal=self.food_item_kcal,
            quantity=self.quantity,
        )
