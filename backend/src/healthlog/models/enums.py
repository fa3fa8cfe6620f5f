from enum import Enum


class FoodUnit(str, Enum):
    serving = "serving"
    cup = "cup"
    tablespoon = "tablespoon"
    ounce = "ounce"
    gram = "gram"
    small = "small"
    medium = "medium"
    large = "large"
    slice = "slice"
    piece = "piece"
    bowl = "bowl"
    plate = "plate"
    bunch = "bunch"
    can = "can"


class MealSlot(str, Enum):
    breakfast = "breakfast"
    morning_snack = "morning_snack"
    lunch = "lunch"
    afternoon_snack = "afternoon_snack"
    dinner = "dinner"
    evening_snack = "evening_snack"


# Day order, used wherever the six buckets are laid out.
MEAL_SLOTS = tuple(slot.value for slot in MealSlot)


def enum_value(value):
    """Plain string for a str-enum member, anything else unchanged."""
    return value.value if isinstance(value, Enum) else value
