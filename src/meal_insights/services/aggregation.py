"""Aggregation of nutrients and food-guide servings across meals."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from meal_insights.domain.analysis import WindowAggregate
from meal_insights.domain.meals import Meal
from meal_insights.domain.nutrition import CFGFoodGroup, Nutrition
from meal_insights.services.nutrition import NutritionSource

_logger = logging.getLogger(__name__)


def count_days(days: set[date], meal_count: int) -> int:
    """Return the number of distinct days, at least 1 when meals exist."""
    if meal_count > 0:
        return max(len(days), 1)
    return len(days)


@dataclass
class AggregationEngine:
    """Sums per-meal values and counts distinct calendar days."""

    nutrition_source: NutritionSource

    def meal_values(self, meal: Meal) -> tuple[Nutrition, CFGFoodGroup]:
        """Return the nutrients and food-guide servings of one meal."""
        return (
            self.nutrition_source.meal_nutrition(meal),
            self.nutrition_source.meal_food_guide_servings(meal),
        )

    def aggregate(self, meals: list[Meal]) -> WindowAggregate:
        """Return totals and the distinct day count for a meal list."""
        nutrients = Nutrition()
        food_groups = CFGFoodGroup()
        days: set[date] = set()
        for meal in meals:
            days.add(meal.day)
            meal_nutrients, meal_servings = self.meal_values(meal)
            nutrients = nutrients + meal_nutrients
            food_groups = food_groups + meal_servings
        return WindowAggregate(
            nutrients=nutrients,
            food_groups=food_groups,
            day_count=count_days(days, len(meals)),
            meal_count=len(meals),
        )

    def nutrient_units(self, names: Iterable[str]) -> dict[str, str]:
        """Return unit labels for every nutrient, "" for unknown ones."""
        units: dict[str, str] = {}
        for name in sorted(set(names)):
            try:
                units[name] = self.nutrition_source.nutrient_unit(name)
            except LookupError:
                _logger.warning("Unknown unit for nutrient %s", name)
                units[name] = ""
        return units
