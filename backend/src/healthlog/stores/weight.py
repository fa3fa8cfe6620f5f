"""Weight ledger: one measurement per date and a versioned goal history."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy import delete, func, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import Session, select

from healthlog.core.database import Database
from healthlog.core.errors import MalformedDocument
from healthlog.models import WeightEntry, WeightGoal


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _active_goals():
    return select(WeightGoal).where(WeightGoal.is_active == True)  # noqa: E712


class WeightLedger:
    """Measurements are keyed by date; goals are append-only with one active row.

    :meth:`set_goal` is the only way to change the goal: it deactivates every
    row and inserts the new active one in a single transaction.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def list_all(self) -> List[WeightEntry]:
        with self.db.session() as session:
            stmt = select(WeightEntry).order_by(WeightEntry.date.desc())
            return list(session.exec(stmt).all())

    def find_by_date(self, date: str) -> Optional[WeightEntry]:
        with self.db.session() as session:
            return session.exec(select(WeightEntry).where(WeightEntry.date == date)).first()

    def upsert(self, date: str, weight: float) -> bool:
        """Insert the measurement or overwrite the one already stored for ``date``."""
        stmt = sqlite_insert(WeightEntry).values(date=date, weight=weight, created_at=_now())
        stmt = stmt.on_conflict_do_update(
            index_elements=["date"],
            set_={"weight": stmt.excluded.weight},
        )
        with self.db.session() as session:
            result = session.execute(stmt)
            session.commit()
        return result.rowcount > 0

    def delete_by_date(self, date: str) -> bool:
        with self.db.session() as session:
            result = session.execute(delete(WeightEntry).where(WeightEntry.date == date))
            session.commit()
        return result.rowcount > 0

    def get_active_goal(self) -> Optional[WeightGoal]:
        # Newest active row wins even if more than one is flagged.
        with self.db.session() as session:
            stmt = _active_goals().order_by(WeightGoal.created_at.desc(), WeightGoal.id.desc())
            return session.exec(stmt).first()

    def count_active_goals(self) -> int:
        with self.db.session() as session:
            stmt = (
                select(func.count())
                .select_from(WeightGoal)
                .where(WeightGoal.is_active == True)  # noqa: E712
            )
            return session.exec(stmt).one()

    def set_goal(self, goal_weight: float) -> WeightGoal:
        def _swap(session: Session) -> WeightGoal:
            session.execute(update(WeightGoal).values(is_active=False))
            goal = WeightGoal(goal_weight=goal_weight, is_active=True)
            session.add(goal)
            session.flush()
            return goal

        return self.db.run_atomic(_swap)

    def replace_all(
        self,
        goal: Optional[float],
        daily_entries: Iterable[Mapping[str, Any]],
    ) -> None:
        self.db.run_atomic(lambda session: self.replace_in(session, goal, daily_entries))

    def replace_in(
        self,
        session: Session,
        goal: Optional[float],
        daily_entries: Iterable[Mapping[str, Any]],
    ) -> None:
        """Clear entries and goals, then insert ``goal`` (if truthy) and every entry."""
        session.execute(delete(WeightEntry))
        session.execute(delete(WeightGoal))

        if goal:
            session.add(WeightGoal(goal_weight=goal, is_active=True))

        for position, entry in enumerate(daily_entries):
            if not isinstance(entry, Mapping):
                raise MalformedDocument(
                    f"weight.daily[{position}] must be an object, got {type(entry).__name__}"
                )
            session.add(WeightEntry(date=entry.get("date"), weight=entry.get("weight")))
        session.flush()
