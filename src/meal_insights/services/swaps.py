"""What-if simulation of substituting one food for another across a window."""

import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from meal_insights.domain.analysis import (
    AnalysisError,
    AnalysisFailure,
    ChangedMeal,
    SwapAnalysisResult,
)
from meal_insights.domain.meals import FoodItem, Meal
from meal_insights.domain.nutrition import CFGFoodGroup, Nutrition
from meal_insights.services.aggregation import AggregationEngine, count_days
from meal_insights.services.meal_window import MealWindowCache

_logger = logging.getLogger(__name__)


def swap_ratio(
    reference_swap_quantity: float, reference_replacement_quantity: float
) -> float:
    """Return the quantity multiplier applied to every swapped occurrence."""
    if reference_swap_quantity == 0:
        return 1.0
    return reference_replacement_quantity / reference_swap_quantity


@dataclass(frozen=True)
class Substitution:
    """Replaces every item named ``item_to_swap_name`` with ``replacement``.

    The ratio is fixed once per analysis from the two representative items
    and applied to each occurrence regardless of its own quantity or unit.
    """

    item_to_swap_name: str
    replacement: FoodItem
    ratio: float

    def apply(self, meal: Meal) -> Meal | None:
        """Return the modified meal, or None when nothing in it matches."""
        if not meal.contains(self.item_to_swap_name):
            return None
        items = tuple(
            FoodItem(
                name=self.replacement.name,
                quantity=item.quantity * self.ratio,
                unit=self.replacement.unit,
            )
            if item.name == self.item_to_swap_name
            else item
            for item in meal.items
        )
        return meal.with_items(items)


@dataclass
class SwapSimulator:
    """Computes original vs. modified totals for a substitution."""

    meal_windows: MealWindowCache
    engine: AggregationEngine

    def simulate(  # noqa: PLR0913
        self,
        user_id: UUID,
        item_to_swap_name: str,
        replacement: FoodItem,
        reference_swap_quantity: float,
        reference_replacement_quantity: float,
        start: date | None = None,
        end: date | None = None,
    ) -> SwapAnalysisResult:
        """Simulate the swap over the window.

        Raises AnalysisError with NO_MEALS for an empty window and
        NO_APPLICABLE_SWAPS when the item never appears in it.
        """
        meals = self.meal_windows.get(user_id, start, end)
        if not meals:
            raise AnalysisError(
                AnalysisFailure.NO_MEALS, "No meals logged in the selected window"
            )

        substitution = Substitution(
            item_to_swap_name=item_to_swap_name,
            replacement=replacement,
            ratio=swap_ratio(reference_swap_quantity, reference_replacement_quantity),
        )

        days: set[date] = set()
        original_totals = Nutrition()
        modified_totals = Nutrition()
        cfg_original = CFGFoodGroup()
        cfg_modified = CFGFoodGroup()
        changed_meals: list[ChangedMeal] = []
        per_meal_original: dict[UUID, Nutrition] = {}
        per_meal_modified: dict[UUID, Nutrition] = {}

        for meal in meals:
            days.add(meal.day)
            nutrition, servings = self.engine.meal_values(meal)
            original_totals = original_totals + nutrition
            cfg_original = cfg_original + servings

            modified = substitution.apply(meal)
            if modified is None:
                modified_totals = modified_totals + nutrition
                cfg_modified = cfg_modified + servings
                continue

            modified_nutrition, modified_servings = self.engine.meal_values(modified)
            modified_totals = modified_totals + modified_nutrition
            cfg_modified = cfg_modified + modified_servings
            changed_meals.append(ChangedMeal(original=meal, modified=modified))
            per_meal_original[meal.id] = nutrition
            per_meal_modified[meal.id] = modified_nutrition

        if not changed_meals:
            raise AnalysisError(
                AnalysisFailure.NO_APPLICABLE_SWAPS,
                f"{item_to_swap_name} does not appear in any meal in the window",
            )

        day_count = count_days(days, len(meals))
        _logger.info(
            "Swap simulated: %s -> %s ratio=%s meals=%s changed=%s days=%s",
            item_to_swap_name,
            replacement.name,
            substitution.ratio,
            len(meals),
            len(changed_meals),
            day_count,
        )
        return SwapAnalysisResult(
            swap_ratio=substitution.ratio,
            day_count=day_count,
            original_totals=original_totals,
            modified_totals=modified_totals,
            original_averages=original_totals.divided_by(day_count),
            modified_averages=modified_totals.divided_by(day_count),
            cfg_original=cfg_original,
            cfg_modified=cfg_modified,
            cfg_original_average=cfg_original.divided_by(day_count),
            cfg_modified_average=cfg_modified.divided_by(day_count),
            changed_meals=tuple(changed_meals),
            per_meal_original=per_meal_original,
            per_meal_modified=per_meal_modified,
            nutrient_units=self.engine.nutrient_units(
                original_totals.names() + modified_totals.names()
            ),
        )
