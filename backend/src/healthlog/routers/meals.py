from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator

from healthlog.models import FoodUnit, MealSlot
from healthlog.projector import CompatibilityProjector, food_to_document
from .deps import check_date, get_projector

router = APIRouter(prefix="/api/meals", tags=["meals"])


class FoodEntryIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    meal_type: MealSlot = Field(alias="mealType")
    name: str
    unit: FoodUnit
    kcal: float = Field(gt=0)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Food name is required and must be a non-empty string")
        return v


class FoodEntryPatch(BaseModel):
    name: Optional[str] = None
    unit: Optional[FoodUnit] = None
    kcal: Optional[float] = Field(default=None, gt=0)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        # blank keeps the current name
        return v.strip() or None


@router.get("", summary="All days plus the food catalog")
def list_meals(projector: CompatibilityProjector = Depends(get_projector)) -> Dict[str, Any]:
    return projector.export_meals()


@router.get("/search", summary="Catalog autocomplete")
def search_foods(
    q: str = Query(default=""),
    projector: CompatibilityProjector = Depends(get_projector),
) -> List[Dict[str, Any]]:
    return [food_to_document(food) for food in projector.catalog.search(q)]


@router.get("/{date}", summary="One day, empty buckets if nothing was logged")
def get_day(date: str, projector: CompatibilityProjector = Depends(get_projector)) -> Dict[str, Any]:
    return projector.export_day(check_date(date))


@router.post("/{date}/food", status_code=201, summary="Log a food under a meal slot")
def add_food(
    date: str,
    payload: FoodEntryIn,
    projector: CompatibilityProjector = Depends(get_projector),
) -> Dict[str, Any]:
    check_date(date)
    meals = projector.meals

    day = meals.get_day(date)
    meal_id = day.id if day else meals.create_day(date)
    item_id = meals.add_item(meal_id, payload.name, payload.unit, payload.kcal, payload.meal_type)
    meals.recompute_total(meal_id)

    if projector.catalog.find(payload.name, payload.unit) is None:
        projector.catalog.add(payload.name, payload.unit, payload.kcal)

    return {
        "id": item_id,
        "name": payload.name,
        "unit": payload.unit.value,
        "kcal": payload.kcal,
        "quantity": 1,
    }


@router.put("/{date}/food/{item_id}", summary="Edit a logged food")
def update_food(
    date: str,
    item_id: int,
    payload: FoodEntryPatch,
    projector: CompatibilityProjector = Depends(get_projector),
) -> Dict[str, Any]:
    meals = projector.meals
    day = meals.get_day(check_date(date))
    if day is None:
        raise HTTPException(404, "No meals found for this date")

    updated = meals.update_item(day.id, item_id, name=payload.name, unit=payload.unit, kcal=payload.kcal)
    if updated is None:
        raise HTTPException(404, "Food item not found")
    meals.recompute_total(day.id)
    return updated.model_dump()


@router.delete("/{date}/food/{item_id}", status_code=204, summary="Remove a logged food")
def delete_food(
    date: str,
    item_id: int,
    projector: CompatibilityProjector = Depends(get_projector),
):
    meals = projector.meals
    day = meals.get_day(check_date(date))
    if day is None:
        raise HTTPException(404, "No meals found for this date")

    if not meals.delete_item(day.id, item_id):
        raise HTTPException(404, "Food item not found")
    meals.recompute_total(day.id)
    return Response(status_code=204)
