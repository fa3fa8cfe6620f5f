from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from healthlog.core.errors import ConstraintViolation, MalformedDocument
from healthlog.models import WeightEntry, WeightGoal


def test_upsert_replaces_the_entry_for_a_date(database, weights):
    assert weights.upsert("2025-08-15", 180.2) is True
    assert weights.upsert("2025-08-15", 179.4) is True

    entry = weights.find_by_date("2025-08-15")
    assert entry.weight == 179.4
    with database.session() as session:
        rows = session.exec(select(WeightEntry).where(WeightEntry.date == "2025-08-15")).all()
    assert len(rows) == 1


def test_find_by_date_missing(weights):
    assert weights.find_by_date("2025-08-15") is None


def test_list_all_newest_first(weights):
    for date, w in (("2025-08-14", 181.0), ("2025-08-16", 179.0), ("2025-08-15", 180.0)):
        weights.upsert(date, w)
    assert [(e.date, e.weight) for e in weights.list_all()] == [
        ("2025-08-16", 179.0),
        ("2025-08-15", 180.0),
        ("2025-08-14", 181.0),
    ]


def test_delete_by_date(weights):
    weights.upsert("2025-08-15", 180.0)
    assert weights.delete_by_date("2025-08-15") is True
    assert weights.find_by_date("2025-08-15") is None
    # absent date is a no-op
    assert weights.delete_by_date("2025-08-15") is False


def test_no_goal_yet(weights):
    assert weights.get_active_goal() is None
    assert weights.count_active_goals() == 0


def test_set_goal_keeps_exactly_one_active(weights):
    first = weights.set_goal(175.0)
    assert first.is_active is True

    weights.set_goal(170.0)
    assert weights.get_active_goal().goal_weight == 170.0
    assert weights.count_active_goals() == 1


def test_goal_history_is_kept(database, weights):
    weights.set_goal(175.0)
    weights.set_goal(170.0)
    with database.session() as session:
        rows = session.exec(select(WeightGoal).order_by(WeightGoal.id)).all()
    assert [(g.goal_weight, g.is_active) for g in rows] == [(175.0, False), (170.0, True)]


def test_failed_set_goal_leaves_previous_goal_active(weights):
    weights.set_goal(175.0)
    with pytest.raises(ConstraintViolation):
        weights.set_goal(None)

    assert weights.get_active_goal().goal_weight == 175.0
    assert weights.count_active_goals() == 1


def test_newest_active_goal_wins_when_several_are_flagged(database, weights):
    now = datetime.now(timezone.utc)
    with database.session() as session:
        session.add(WeightGoal(goal_weight=160.0, is_active=True, created_at=now - timedelta(days=2)))
        session.add(WeightGoal(goal_weight=165.0, is_active=True, created_at=now))
        session.add(WeightGoal(goal_weight=150.0, is_active=False, created_at=now + timedelta(days=1)))
        session.commit()

    assert weights.count_active_goals() == 2
    assert weights.get_active_goal().goal_weight == 165.0


def test_replace_all(weights):
    weights.set_goal(200.0)
    weights.upsert("2020-01-01", 210.0)

    weights.replace_all(170.0, [
        {"date": "2025-08-15", "weight": 180.2},
        {"date": "2025-08-14", "weight": 181.0},
    ])

    assert weights.get_active_goal().goal_weight == 170.0
    assert weights.count_active_goals() == 1
    assert [e.date for e in weights.list_all()] == ["2025-08-15", "2025-08-14"]


def test_replace_all_without_goal(weights):
    weights.set_goal(200.0)
    weights.replace_all(None, [])
    assert weights.get_active_goal() is None
    assert weights.list_all() == []


def test_replace_all_is_all_or_nothing(weights):
    weights.set_goal(200.0)
    weights.upsert("2020-01-01", 210.0)

    with pytest.raises(ConstraintViolation):
        weights.replace_all(170.0, [
            {"date": "2025-08-15", "weight": 180.2},
            {"date": "2025-08-15", "weight": 181.0},
        ])
    with pytest.raises(MalformedDocument):
        weights.replace_all(170.0, [{"date": "2025-08-15", "weight": 180.2}, 181.0])

    assert weights.get_active_goal().goal_weight == 200.0
    assert [(e.date, e.weight) for e in weights.list_all()] == [("2020-01-01", 210.0)]
