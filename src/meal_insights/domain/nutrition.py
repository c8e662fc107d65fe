"""Nutrition domain models."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


@dataclass(frozen=True)
class Nutrition:
    """Nutrient amounts keyed by nutrient name.

    Addition is a per-key sum over the union of nutrient names; a nutrient
    missing on one side reads as zero.
    """

    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __add__(self, other: "Nutrition") -> "Nutrition":
        merged = dict(self.values)
        for name, amount in other.values.items():
            merged[name] = merged.get(name, 0.0) + amount
        return Nutrition(merged)

    def value(self, name: str) -> float:
        """Return the amount of a nutrient, or 0.0 when absent."""
        return self.values.get(name, 0.0)

    def names(self) -> list[str]:
        """Return nutrient names in sorted order."""
        return sorted(self.values)

    def scaled(self, factor: float) -> "Nutrition":
        """Return every amount multiplied by ``factor``."""
        return Nutrition(
            {name: amount * factor for name, amount in self.values.items()}
        )

    def divided_by(self, divisor: float) -> "Nutrition":
        """Return every amount divided by ``divisor``."""
        return Nutrition(
            {name: amount / divisor for name, amount in self.values.items()}
        )

    def as_dict(self) -> dict[str, float]:
        """Return a plain dict copy."""
        return dict(self.values)


class FoodGroup(Enum):
    """Canada's Food Guide serving categories."""

    VEGETABLES_AND_FRUITS = "vegetables_and_fruits"
    GRAIN_PRODUCTS = "grain_products"
    MILK_AND_ALTERNATIVES = "milk_and_alternatives"
    MEAT_AND_ALTERNATIVES = "meat_and_alternatives"
    OILS_AND_FATS = "oils_and_fats"


@dataclass(frozen=True)
class CFGFoodGroup:
    """Servings in each food-guide group (oils and fats in ml)."""

    vegetables_and_fruits: float = 0.0
    grain_products: float = 0.0
    milk_and_alternatives: float = 0.0
    meat_and_alternatives: float = 0.0
    oils_and_fats: float = 0.0

    def __add__(self, other: "CFGFoodGroup") -> "CFGFoodGroup":
        return CFGFoodGroup(
            vegetables_and_fruits=self.vegetables_and_fruits
            + other.vegetables_and_fruits,
            grain_products=self.grain_products + other.grain_products,
            milk_and_alternatives=self.milk_and_alternatives
            + other.milk_and_alternatives,
            meat_and_alternatives=self.meat_and_alternatives
            + other.meat_and_alternatives,
            oils_and_fats=self.oils_and_fats + other.oils_and_fats,
        )

    def value(self, group: FoodGroup) -> float:
        """Return the servings for one group."""
        return getattr(self, group.value)

    def scaled(self, factor: float) -> "CFGFoodGroup":
        """Return every group multiplied by ``factor``."""
        return CFGFoodGroup(
            **{group.value: self.value(group) * factor for group in FoodGroup}
        )

    def divided_by(self, divisor: float) -> "CFGFoodGroup":
        """Return every group divided by ``divisor``."""
        return CFGFoodGroup(
            **{group.value: self.value(group) / divisor for group in FoodGroup}
        )

    def as_dict(self) -> dict[FoodGroup, float]:
        return {group: self.value(group) for group in FoodGroup}


class Sex(Enum):
    """Sex as recorded on a user profile."""

    MALE = "Male"
    FEMALE = "Female"


@dataclass(frozen=True)
class UserProfile:
    """Profile fields the food guide recommendation depends on."""

    sex: Sex
