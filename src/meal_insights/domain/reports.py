"""Domain models for plain intake reports."""

from dataclasses import dataclass
from enum import Enum

from meal_insights.domain.nutrition import CFGFoodGroup, FoodGroup, Nutrition


@dataclass(frozen=True)
class IntakeReport:
    """Nutrient intake over a window."""

    day_count: int
    totals: Nutrition
    averages: Nutrition
    units: dict[str, str]


class AlignmentStatus(Enum):
    """How average intake of a group compares with the recommendation."""

    BELOW = "below"
    ON_TRACK = "on_track"
    ABOVE = "above"


@dataclass(frozen=True)
class FoodGroupAlignment:
    group: FoodGroup
    actual: float
    recommended: float
    percent_of_recommendation: float
    status: AlignmentStatus


@dataclass(frozen=True)
class FoodGuideReport:
    """Average daily servings against the food guide."""

    day_count: int
    average: CFGFoodGroup
    recommended: CFGFoodGroup
    groups: list[FoodGroupAlignment]
