from .foods import FoodCatalog
from .meals import MealLedger
from .weight import WeightLedger

__all__ = ["FoodCatalog", "MealLedger", "WeightLedger"]
