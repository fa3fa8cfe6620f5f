from healthlog.models import DayMeals, LoggedFood
from healthlog.utils.nutrition import day_total_kcal, sum_kcal


def _food(item_id, kcal, quantity=1):
    return LoggedFood(id=item_id, name=f"food-{item_id}", unit="serving", kcal=kcal, quantity=quantity)


def test_sum_kcal_basic():
    assert sum_kcal([_food(1, 95), _food(2, 180.5)]) == 275.5


def test_sum_kcal_ignores_quantity():
    assert sum_kcal([_food(1, 100, quantity=3)]) == 100


def test_day_total_covers_all_slots():
    day = DayMeals(
        id=1,
        date="2025-01-02",
        breakfast=[_food(1, 100)],
        morning_snack=[_food(2, 50)],
        lunch=[_food(3, 300)],
        afternoon_snack=[_food(4, 25)],
        dinner=[_food(5, 400), _food(6, 10)],
        evening_snack=[_food(7, 15)],
    )
    assert day_total_kcal(day) == 900


def test_day_total_of_missing_day_is_zero():
    assert day_total_kcal(None) == 0.0
