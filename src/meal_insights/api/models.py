"""Pydantic models for analysis API payloads."""

from datetime import date

from pydantic import BaseModel, Field

from meal_insights.domain.meals import FoodItem, Meal, MealType
from meal_insights.domain.nutrition import Sex


class FoodItemPayload(BaseModel):
    """A food as a count of its reference unit."""

    name: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    unit: str

    def to_domain(self) -> FoodItem:
        return FoodItem(name=self.name, quantity=self.quantity, unit=self.unit)


class MealPayload(BaseModel):
    """A meal to log."""

    eaten_on: date
    meal_type: MealType
    items: list[FoodItemPayload] = Field(min_length=1)

    def to_domain(self) -> Meal:
        return Meal(
            eaten_at=self.eaten_on,
            meal_type=self.meal_type,
            items=tuple(item.to_domain() for item in self.items),
        )


class SwapRequest(BaseModel):
    """Representative items of a swap and the window to simulate it over."""

    item_to_swap: FoodItemPayload
    replacement: FoodItemPayload
    start: date | None = None
    end: date | None = None


class FoodGuideRequest(BaseModel):
    sex: Sex
    start: date | None = None
    end: date | None = None
