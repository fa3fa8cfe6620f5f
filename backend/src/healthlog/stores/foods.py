"""Food catalog: the reusable name/unit/kcal definitions offered for logging."""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Union

from sqlalchemy import delete, func
from sqlmodel import Session, select

from healthlog.core.database import Database
from healthlog.core.errors import MalformedDocument
from healthlog.models import FoodItem, FoodUnit, enum_value

SEARCH_MIN_CHARS = 2
SEARCH_LIMIT = 10


def _escape_like(value: str) -> str:
    """Escape LIKE wildcard characters in user input."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class FoodCatalog:
    """Catalog rows are never edited; they are added one by one or replaced wholesale.

    No deduplication happens here. Callers that want one row per name/unit
    check :meth:`find` before :meth:`add`.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def list_all(self) -> List[FoodItem]:
        with self.db.session() as session:
            stmt = select(FoodItem).order_by(FoodItem.name.asc(), FoodItem.id.asc())
            return list(session.exec(stmt).all())

    def find_by_name(self, name: str) -> Optional[FoodItem]:
        with self.db.session() as session:
            stmt = select(FoodItem).where(FoodItem.name == name).order_by(FoodItem.id.asc())
            return session.exec(stmt).first()

    def find(self, name: str, unit: Union[FoodUnit, str]) -> Optional[FoodItem]:
        """Case-insensitive name match with the same unit."""
        with self.db.session() as session:
            stmt = (
                select(FoodItem)
                .where(func.lower(FoodItem.name) == name.strip().lower())
                .where(FoodItem.unit == enum_value(unit))
                .order_by(FoodItem.id.asc())
            )
            return session.exec(stmt).first()

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> List[FoodItem]:
        """Autocomplete lookup: prefix matches first, then alphabetical."""
        q = (query or "").strip().lower()
        if len(q) < SEARCH_MIN_CHARS:
            return []

        like = f"%{_escape_like(q)}%"
        with self.db.session() as session:
            stmt = select(FoodItem).where(func.lower(FoodItem.name).like(like, escape="\\"))
            rows = list(session.exec(stmt).all())

        rows.sort(key=lambda food: (not food.name.lower().startswith(q), food.name.lower()))
        return rows[:limit]

    def add(self, name: str, unit: Union[FoodUnit, str], kcal: float) -> int:
        food = FoodItem(name=name, unit=enum_value(unit), kcal=kcal)
        with self.db.session() as session:
            session.add(food)
            session.commit()
            session.refresh(food)
        return food.id

    def replace_all(self, items: Iterable[Mapping[str, Any]]) -> None:
        self.db.run_atomic(lambda session: self.replace_in(session, items))

    def replace_in(self, session: Session, items: Iterable[Mapping[str, Any]]) -> None:
        """Wipe the catalog and insert ``items`` inside the caller's transaction."""
        session.execute(delete(FoodItem))
        for position, item in enumerate(items):
            if not isinstance(item, Mapping):
                raise MalformedDocument(
                    f"foodDatabase[{position}] must be an object, got {type(item).__name__}"
                )
            session.add(
                FoodItem(
                    name=item.get("name"),
                    unit=enum_value(item.get("unit")),
                    kcal=item.get("kcal"),
                )
            )
        session.flush()
