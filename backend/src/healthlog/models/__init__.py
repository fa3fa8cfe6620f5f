from .enums import MEAL_SLOTS, FoodUnit, MealSlot, enum_value
from .foods import FoodItem
from .meals import MealItem, MealRecord
from .schemas import DayMeals, FoodSnapshot, LoggedFood, StaleTotal
from .weight import WeightEntry, WeightGoal

__all__ = [
    "MEAL_SLOTS",
    "DayMeals",
    "FoodItem",
    "FoodSnapshot",
    "FoodUnit",
    "LoggedFood",
    "MealItem",
    "MealRecord",
    "MealSlot",
    "StaleTotal",
    "WeightEntry",
    "WeightGoal",
    "enum_value",
]
