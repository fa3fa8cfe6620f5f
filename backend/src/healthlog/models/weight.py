from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class WeightEntry(SQLModel, table=True):
    __tablename__ = "weight_entries"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: str = Field(index=True, unique=True)
    weight: float
    created_at: datetime = Field(default_factory=_now)


class WeightGoal(SQLModel, table=True):
    """Goal history; only the newest active row counts."""

    __tablename__ = "weight_goals"

    id: Optional[int] = Field(default=None, primary_key=True)
    goal_weight: float
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=_now)
