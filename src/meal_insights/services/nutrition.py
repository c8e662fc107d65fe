"""Nutrition and food-guide lookups for meals."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from meal_insights.domain.meals import FoodItem, Meal
from meal_insights.domain.nutrition import CFGFoodGroup, Nutrition, Sex, UserProfile

_MALE_RECOMMENDED = CFGFoodGroup(
    vegetables_and_fruits=9,
    grain_products=8,
    milk_and_alternatives=2,
    meat_and_alternatives=3,
    oils_and_fats=45,
)
_DEFAULT_RECOMMENDED = CFGFoodGroup(
    vegetables_and_fruits=7.5,
    grain_products=6.5,
    milk_and_alternatives=2,
    meat_and_alternatives=2,
    oils_and_fats=45,
)

_logger = logging.getLogger(__name__)


class NutritionSource(Protocol):
    """Computes nutrient and food-guide values for meals."""

    def meal_nutrition(self, meal: Meal) -> Nutrition:
        """Return the nutrients of a meal."""

    def meal_food_guide_servings(self, meal: Meal) -> CFGFoodGroup:
        """Return the food-guide servings of a meal."""

    def nutrient_unit(self, nutrient: str) -> str:
        """Return the unit label of a nutrient; raise LookupError if unknown."""


class FoodCatalogRepository(Protocol):
    """Per-reference-unit food data."""

    def unit_nutrients(self, food_name: str, unit: str) -> Nutrition | None:
        """Return nutrients of one reference unit of a food, if known."""

    def unit_servings(self, food_name: str, unit: str) -> CFGFoodGroup | None:
        """Return food-guide servings of one reference unit, if known."""

    def nutrient_unit(self, nutrient: str) -> str:
        """Return the unit label of a nutrient; raise LookupError if unknown."""


@dataclass
class CatalogNutritionCalculator(NutritionSource):
    """Scales per-unit catalog profiles by each item's quantity."""

    catalog: FoodCatalogRepository
    _nutrients: dict[tuple[str, str], Nutrition | None] = field(default_factory=dict)
    _servings: dict[tuple[str, str], CFGFoodGroup | None] = field(
        default_factory=dict
    )

    def meal_nutrition(self, meal: Meal) -> Nutrition:
        total = Nutrition()
        for item in meal.items:
            total = total + self.item_nutrition(item)
        return total

    def meal_food_guide_servings(self, meal: Meal) -> CFGFoodGroup:
        total = CFGFoodGroup()
        for item in meal.items:
            total = total + self.item_food_guide_servings(item)
        return total

    def item_nutrition(self, item: FoodItem) -> Nutrition:
        key = (item.name, item.unit)
        if key not in self._nutrients:
            self._nutrients[key] = self.catalog.unit_nutrients(item.name, item.unit)
        per_unit = self._nutrients[key]
        if per_unit is None:
            _logger.warning(
                "No nutrient profile: food=%s unit=%s", item.name, item.unit
            )
            return Nutrition()
        return per_unit.scaled(item.quantity)

    def item_food_guide_servings(self, item: FoodItem) -> CFGFoodGroup:
        key = (item.name, item.unit)
        if key not in self._servings:
            self._servings[key] = self.catalog.unit_servings(item.name, item.unit)
        per_unit = self._servings[key]
        if per_unit is None:
            return CFGFoodGroup()
        return per_unit.scaled(item.quantity)

    def nutrient_unit(self, nutrient: str) -> str:
        return self.catalog.nutrient_unit(nutrient)


def recommended_daily_servings(profile: UserProfile) -> CFGFoodGroup:
    """Return the food guide's daily servings for a profile."""
    if profile.sex is Sex.MALE:
        return _MALE_RECOMMENDED
    return _DEFAULT_RECOMMENDED
