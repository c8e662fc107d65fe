"""Projection of swap analysis results into display-ready views."""

from dataclasses import dataclass

from meal_insights.domain.analysis import SwapAnalysisResult
from meal_insights.domain.meals import MealType
from meal_insights.domain.nutrition import CFGFoodGroup, FoodGroup, Nutrition
from meal_insights.domain.projections import (
    ChartKind,
    FoodGroupComparison,
    MealDelta,
    NutrientComparison,
    NutrientDelta,
    ProjectionPayload,
    SeriesKey,
    SeriesPoint,
    UnsupportedProjectionError,
    ViewKind,
)

DEFAULT_CHANGE_EPSILON = 0.01


def percent_change(original: float, modified: float) -> float:
    """Return the change relative to ``original``.

    A zero original reads as +100% when something was added, else 0%.
    """
    change = modified - original
    if original != 0:
        return change / original * 100
    return 100.0 if modified > 0 else 0.0


@dataclass
class AnalysisProjector:
    """Reads cached analysis fields into cumulative, average or per-meal views."""

    change_epsilon: float = DEFAULT_CHANGE_EPSILON

    def project(
        self, result: SwapAnalysisResult, view: ViewKind, chart: ChartKind
    ) -> ProjectionPayload:
        """Return one view of the result without recomputing anything."""
        if view is ViewKind.PER_MEAL:
            if chart is ChartKind.FOOD_GUIDE:
                raise UnsupportedProjectionError(
                    "Per-meal analysis has no food guide projection"
                )
            return ProjectionPayload(
                view=view,
                chart=chart,
                day_count=result.day_count,
                meals=self._per_meal(result),
            )

        if chart is ChartKind.FOOD_GUIDE:
            if view is ViewKind.CUMULATIVE:
                original, modified = result.cfg_original, result.cfg_modified
            else:
                original = result.cfg_original_average
                modified = result.cfg_modified_average
            return ProjectionPayload(
                view=view,
                chart=chart,
                day_count=result.day_count,
                food_groups=_compare_food_groups(original, modified),
            )

        if view is ViewKind.CUMULATIVE:
            totals = (result.original_totals, result.modified_totals)
        else:
            totals = (result.original_averages, result.modified_averages)
        return ProjectionPayload(
            view=view,
            chart=chart,
            day_count=result.day_count,
            nutrients=_compare_nutrients(*totals, result.nutrient_units),
        )

    def time_series(self, result: SwapAnalysisResult) -> list[SeriesPoint]:
        """Return per-meal original/modified values ordered by day and meal."""
        points: list[SeriesPoint] = []
        for changed in result.changed_meals:
            meal = changed.original
            original = result.per_meal_original[meal.id]
            modified = result.per_meal_modified[meal.id]
            for nutrient in sorted(set(original.names()) | set(modified.names())):
                points.append(
                    SeriesPoint(
                        key=SeriesKey(meal.day, meal.meal_type, nutrient),
                        original=original.value(nutrient),
                        modified=modified.value(nutrient),
                    )
                )
        meal_order = list(MealType)
        points.sort(
            key=lambda point: (
                point.key.day,
                meal_order.index(point.key.meal_type),
                point.key.nutrient,
            )
        )
        return points

    def _per_meal(self, result: SwapAnalysisResult) -> list[MealDelta]:
        meals: list[MealDelta] = []
        for changed in result.changed_meals:
            meal = changed.original
            original = result.per_meal_original[meal.id]
            modified = result.per_meal_modified[meal.id]
            deltas: list[NutrientDelta] = []
            for nutrient in sorted(set(original.names()) | set(modified.names())):
                before = original.value(nutrient)
                after = modified.value(nutrient)
                delta = after - before
                if abs(delta) <= self.change_epsilon:
                    continue
                deltas.append(
                    NutrientDelta(
                        nutrient=nutrient,
                        unit=result.nutrient_units.get(nutrient, ""),
                        original=before,
                        modified=after,
                        delta=delta,
                        percent_change=None if before == 0 else delta / before * 100,
                    )
                )
            meals.append(
                MealDelta(
                    meal_id=meal.id,
                    day=meal.day,
                    meal_type=meal.meal_type,
                    nutrients=deltas,
                )
            )
        return meals


def _compare_nutrients(
    original: Nutrition, modified: Nutrition, units: dict[str, str]
) -> list[NutrientComparison]:
    rows: list[NutrientComparison] = []
    for nutrient in sorted(set(original.names()) | set(modified.names())):
        before = original.value(nutrient)
        after = modified.value(nutrient)
        rows.append(
            NutrientComparison(
                nutrient=nutrient,
                unit=units.get(nutrient, ""),
                original=before,
                modified=after,
                change=after - before,
                percent_change=percent_change(before, after),
            )
        )
    return rows


def _compare_food_groups(
    original: CFGFoodGroup, modified: CFGFoodGroup
) -> list[FoodGroupComparison]:
    return [
        FoodGroupComparison(
            group=group,
            original=original.value(group),
            modified=modified.value(group),
            change=modified.value(group) - original.value(group),
            percent_change=percent_change(
                original.value(group), modified.value(group)
            ),
        )
        for group in FoodGroup
    ]
