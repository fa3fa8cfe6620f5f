from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from healthlog.projector import CompatibilityProjector
from healthlog.utils.validators import MAX_WEIGHT, local_today, round_weight
from .deps import check_date, get_projector

router = APIRouter(prefix="/api/weight", tags=["weight"])


class WeightIn(BaseModel):
    weight: float = Field(gt=0, le=MAX_WEIGHT)
    date: Optional[str] = None


class GoalIn(BaseModel):
    goal: float = Field(gt=0, le=MAX_WEIGHT)


@router.get("", summary="Goal plus all measurements, newest first")
def get_weight(projector: CompatibilityProjector = Depends(get_projector)) -> Dict[str, Any]:
    return projector.export_weight()


@router.post("", status_code=201, summary="Record a measurement (replaces the one for that day)")
def add_weight(
    payload: WeightIn,
    projector: CompatibilityProjector = Depends(get_projector),
) -> Dict[str, Any]:
    date = check_date(payload.date) if payload.date else local_today()
    weight = round_weight(payload.weight)
    projector.weights.upsert(date, weight)
    return {"date": date, "weight": weight}


@router.put("/goal", summary="Replace the active goal")
def set_goal(
    payload: GoalIn,
    projector: CompatibilityProjector = Depends(get_projector),
) -> Dict[str, Any]:
    goal = projector.weights.set_goal(payload.goal)
    return {"goal": goal.goal_weight}


@router.delete("/{date}", status_code=204, summary="Remove the measurement of a day")
def delete_weight(date: str, projector: CompatibilityProjector = Depends(get_projector)):
    projector.weights.delete_by_date(check_date(date))
    return Response(status_code=204)
