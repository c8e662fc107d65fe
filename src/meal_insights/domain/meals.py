"""Domain models for logged meals."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4


class MealType(Enum):
    """Meal slot within a day."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"


@dataclass(frozen=True)
class FoodItem:
    """A food logged as a count of its reference unit.

    ``quantity`` is a multiplier of ``unit`` (e.g. 2 x "5g"), not raw grams.
    Items with equal names are the same ingredient for swap purposes.
    """

    name: str
    quantity: float
    unit: str


@dataclass(frozen=True)
class Meal:
    """An immutable logged meal."""

    eaten_at: date
    meal_type: MealType
    items: tuple[FoodItem, ...]
    id: UUID = field(default_factory=uuid4)

    @property
    def day(self) -> date:
        """Calendar day of the meal, ignoring time of day."""
        if isinstance(self.eaten_at, datetime):
            return self.eaten_at.date()
        return self.eaten_at

    def contains(self, food_name: str) -> bool:
        """Return True when any item has the given name."""
        return any(item.name == food_name for item in self.items)

    def with_items(self, items: tuple[FoodItem, ...]) -> "Meal":
        """Return a copy of the meal with new items and the same identity."""
        return replace(self, items=items)
