from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FoodItem(SQLModel, table=True):
    """Catalog entry. Name+unit is unique by convention only."""

    __tablename__ = "food_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    unit: str
    kcal: float
    created_at: datetime = Field(default_factory=_now)
