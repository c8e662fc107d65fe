"""Plain nutrient-intake and food-guide alignment reports."""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from meal_insights.domain.analysis import (
    AnalysisError,
    AnalysisFailure,
    WindowAggregate,
    WindowKey,
    validate_range,
)
from meal_insights.domain.nutrition import FoodGroup, Nutrition, UserProfile
from meal_insights.domain.reports import (
    AlignmentStatus,
    FoodGroupAlignment,
    FoodGuideReport,
    IntakeReport,
)
from meal_insights.services.aggregation import AggregationEngine
from meal_insights.services.analysis_cache import WindowedAggregationCache
from meal_insights.services.meal_window import MealWindowCache, resolve_window
from meal_insights.services.nutrition import recommended_daily_servings

MAIN_NUTRIENTS = {
    "PROTEIN": "Protein",
    "CARBOHYDRATE, TOTAL (BY DIFFERENCE)": "Carbohydrates",
    "FAT (TOTAL LIPIDS)": "Fat",
    "FIBRE, TOTAL DIETARY": "Fiber",
    "IRON": "Iron",
    "SODIUM": "Sodium",
    "CALCIUM": "Calcium",
    "POTASSIUM": "Potassium",
    "CHOLESTEROL": "Cholesterol",
}
OTHER_NUTRIENTS = "Other"

_GRAMS_PER_UNIT = {
    "g": 1.0,
    "mg": 1e-3,
    "µg": 1e-6,
    "μg": 1e-6,
    "ug": 1e-6,
}

ON_TRACK_LOW = 80.0
ON_TRACK_HIGH = 120.0


@dataclass
class ReportService:
    """Intake reports for one user, cached per meal window."""

    meal_windows: MealWindowCache
    engine: AggregationEngine
    user_id: UUID
    _cache: WindowedAggregationCache[WindowKey, WindowAggregate] = field(init=False)

    def __post_init__(self) -> None:
        self._cache = WindowedAggregationCache(
            self._aggregate_window, name="intake report"
        )
        self.meal_windows.subscribe(self._cache.invalidate)

    def nutrient_intake(
        self, start: date | None = None, end: date | None = None
    ) -> IntakeReport:
        """Return nutrient totals and per-day averages for the window."""
        aggregate = self._aggregate(start, end)
        return IntakeReport(
            day_count=aggregate.day_count,
            totals=aggregate.nutrients,
            averages=aggregate.nutrient_averages,
            units=self.engine.nutrient_units(aggregate.nutrients.names()),
        )

    def food_guide_alignment(
        self,
        profile: UserProfile,
        start: date | None = None,
        end: date | None = None,
    ) -> FoodGuideReport:
        """Return average daily servings against the recommended servings."""
        aggregate = self._aggregate(start, end)
        average = aggregate.food_group_averages
        recommended = recommended_daily_servings(profile)
        return FoodGuideReport(
            day_count=aggregate.day_count,
            average=average,
            recommended=recommended,
            groups=[
                _alignment(group, average.value(group), recommended.value(group))
                for group in FoodGroup
            ],
        )

    def invalidate(self) -> None:
        self._cache.invalidate()

    @property
    def cache(self) -> WindowedAggregationCache[WindowKey, WindowAggregate]:
        return self._cache

    def _aggregate(self, start: date | None, end: date | None) -> WindowAggregate:
        validate_range(start, end)
        key = resolve_window(
            self.user_id,
            start,
            end,
            self.meal_windows.all_time_start,
            self.meal_windows.all_time_end,
        )
        return self._cache.get_or_compute(key)

    def _aggregate_window(self, key: WindowKey) -> WindowAggregate:
        meals = self.meal_windows.get(key.user_id, key.start, key.end)
        if not meals:
            raise AnalysisError(
                AnalysisFailure.NO_MEALS, "No meals logged in the selected window"
            )
        return self.engine.aggregate(meals)


def _alignment(
    group: FoodGroup, actual: float, recommended: float
) -> FoodGroupAlignment:
    percent = actual / recommended * 100 if recommended > 0 else 0.0
    if percent < ON_TRACK_LOW:
        status = AlignmentStatus.BELOW
    elif percent > ON_TRACK_HIGH:
        status = AlignmentStatus.ABOVE
    else:
        status = AlignmentStatus.ON_TRACK
    return FoodGroupAlignment(
        group=group,
        actual=actual,
        recommended=recommended,
        percent_of_recommendation=percent,
        status=status,
    )


def nutrient_distribution(
    averages: Nutrition, units: dict[str, str]
) -> dict[str, float]:
    """Return main nutrients in grams with the rest summed under "Other".

    Nutrients in units that are not masses (e.g. kcal) count as zero.
    """
    distribution: dict[str, float] = {}
    other = 0.0
    for nutrient in averages.names():
        factor = _GRAMS_PER_UNIT.get(units.get(nutrient, "").lower(), 0.0)
        grams = averages.value(nutrient) * factor
        label = MAIN_NUTRIENTS.get(nutrient)
        if label is None:
            other += grams
        else:
            distribution[label] = grams
    if other > 0:
        distribution[OTHER_NUTRIENTS] = other
    return distribution
