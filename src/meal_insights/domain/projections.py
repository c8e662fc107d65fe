"""Display-ready projections of a swap analysis."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import NamedTuple
from uuid import UUID

from meal_insights.domain.meals import MealType
from meal_insights.domain.nutrition import FoodGroup


class ViewKind(Enum):
    """Which slice of the analysis to show."""

    CUMULATIVE = "cumulative"
    AVERAGE = "average"
    PER_MEAL = "per_meal"


class ChartKind(Enum):
    """Nutrient space or food-guide space."""

    NUTRIENT = "nutrient"
    FOOD_GUIDE = "food_guide"


class UnsupportedProjectionError(ValueError):
    """Raised for a view/chart combination that has no projection."""


@dataclass(frozen=True)
class NutrientComparison:
    """Original vs. modified amount of one nutrient."""

    nutrient: str
    unit: str
    original: float
    modified: float
    change: float
    percent_change: float


@dataclass(frozen=True)
class FoodGroupComparison:
    """Original vs. modified servings of one food-guide group."""

    group: FoodGroup
    original: float
    modified: float
    change: float
    percent_change: float


@dataclass(frozen=True)
class NutrientDelta:
    """Change of one nutrient within one meal.

    ``percent_change`` is None when the original amount is zero.
    """

    nutrient: str
    unit: str
    original: float
    modified: float
    delta: float
    percent_change: float | None


@dataclass(frozen=True)
class MealDelta:
    """Nutrient changes for a single changed meal."""

    meal_id: UUID
    day: date
    meal_type: MealType
    nutrients: list[NutrientDelta]


@dataclass(frozen=True)
class ProjectionPayload:
    """One view of an analysis; only the section for the chart kind is filled."""

    view: ViewKind
    chart: ChartKind
    day_count: int
    nutrients: list[NutrientComparison] = field(default_factory=list)
    food_groups: list[FoodGroupComparison] = field(default_factory=list)
    meals: list[MealDelta] = field(default_factory=list)


class SeriesKey(NamedTuple):
    """Key of one per-meal time-series point."""

    day: date
    meal_type: MealType
    nutrient: str


@dataclass(frozen=True)
class SeriesPoint:
    key: SeriesKey
    original: float
    modified: float
