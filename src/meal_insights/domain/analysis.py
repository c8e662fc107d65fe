"""Domain models for windowed aggregation and swap analysis."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from uuid import UUID

from meal_insights.domain.meals import FoodItem, Meal
from meal_insights.domain.nutrition import CFGFoodGroup, Nutrition


class AnalysisFailure(Enum):
    """Recoverable failure kinds surfaced to callers."""

    INVALID_RANGE = "INVALID_RANGE"
    NO_MEALS = "NO_MEALS"
    NO_APPLICABLE_SWAPS = "NO_APPLICABLE_SWAPS"
    COLLABORATOR_FAILURE = "COLLABORATOR_FAILURE"


class AnalysisError(Exception):
    """Typed analysis failure; cache state is left untouched when raised."""

    def __init__(self, failure: AnalysisFailure, message: str) -> None:
        super().__init__(message)
        self.failure = failure
        self.message = message


def validate_range(start: date | None, end: date | None) -> None:
    """Reject a window whose start falls after its end."""
    if start is not None and end is not None and start > end:
        raise AnalysisError(
            AnalysisFailure.INVALID_RANGE,
            f"Start date {start.isoformat()} is after end date {end.isoformat()}",
        )


@dataclass(frozen=True)
class WindowKey:
    """Identity of a resolved meal window."""

    user_id: UUID
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class WindowAggregate:
    """Totals for a meal list and the number of distinct days it spans."""

    nutrients: Nutrition
    food_groups: CFGFoodGroup
    day_count: int
    meal_count: int

    @property
    def nutrient_averages(self) -> Nutrition:
        return self.nutrients.divided_by(max(self.day_count, 1))

    @property
    def food_group_averages(self) -> CFGFoodGroup:
        return self.food_groups.divided_by(max(self.day_count, 1))


@dataclass(frozen=True)
class AnalysisKey:
    """Identity of a swap analysis.

    ``None`` bounds mean all logged history. Items compare by value, so a
    later selection of an equal item yields an equal key.
    """

    item_to_swap: FoodItem
    replacement: FoodItem
    start: date | None = None
    end: date | None = None

    @property
    def item_to_swap_name(self) -> str:
        return self.item_to_swap.name


@dataclass(frozen=True)
class ChangedMeal:
    """A meal affected by a swap, before and after substitution."""

    original: Meal
    modified: Meal


@dataclass(frozen=True)
class SwapAnalysisResult:
    """Original vs. modified projections of one swap over one window."""

    swap_ratio: float
    day_count: int
    original_totals: Nutrition
    modified_totals: Nutrition
    original_averages: Nutrition
    modified_averages: Nutrition
    cfg_original: CFGFoodGroup
    cfg_modified: CFGFoodGroup
    cfg_original_average: CFGFoodGroup
    cfg_modified_average: CFGFoodGroup
    changed_meals: tuple[ChangedMeal, ...]
    per_meal_original: dict[UUID, Nutrition]
    per_meal_modified: dict[UUID, Nutrition]
    nutrient_units: dict[str, str]
