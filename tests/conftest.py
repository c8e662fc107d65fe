"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID, uuid4

import pytest

from meal_insights.config import Settings
from meal_insights.containers import AppContainer
from meal_insights.domain.meals import FoodItem, Meal, MealType
from meal_insights.domain.nutrition import CFGFoodGroup, Nutrition
from meal_insights.services.analysis import AnalysisSessionRegistry
from meal_insights.services.meal_window import MealLogRepository
from meal_insights.services.nutrition import NutritionSource

ENERGY = "ENERGY (KILOCALORIES)"
PROTEIN = "PROTEIN"
FAT = "FAT (TOTAL LIPIDS)"
CARBOHYDRATE = "CARBOHYDRATE, TOTAL (BY DIFFERENCE)"
FIBRE = "FIBRE, TOTAL DIETARY"
SODIUM = "SODIUM"
IRON = "IRON"
CALCIUM = "CALCIUM"
CAFFEINE = "CAFFEINE"

BUTTER = FoodItem(name="Butter", quantity=20, unit="5g")
BEEF = FoodItem(name="Beef", quantity=20, unit="55g")
BREAD = FoodItem(name="Bread", quantity=2, unit="35g")
APPLE = FoodItem(name="Apple", quantity=1, unit="1 medium")
MILK = FoodItem(name="Milk", quantity=1, unit="250ml")
COFFEE = FoodItem(name="Coffee", quantity=1, unit="250ml")

UNIT_NUTRIENTS: dict[tuple[str, str], dict[str, float]] = {
    ("Butter", "5g"): {ENERGY: 36.0, FAT: 4.0, PROTEIN: 0.05},
    ("Beef", "55g"): {ENERGY: 140.0, FAT: 9.0, PROTEIN: 14.0, IRON: 1.5},
    ("Bread", "35g"): {ENERGY: 90.0, PROTEIN: 3.0, CARBOHYDRATE: 17.0, SODIUM: 170.0},
    ("Apple", "1 medium"): {ENERGY: 95.0, CARBOHYDRATE: 25.0, FIBRE: 4.5},
    ("Milk", "250ml"): {ENERGY: 120.0, PROTEIN: 8.0, CALCIUM: 300.0},
    ("Coffee", "250ml"): {ENERGY: 2.0, CAFFEINE: 95.0},
}

UNIT_SERVINGS: dict[tuple[str, str], CFGFoodGroup] = {
    ("Butter", "5g"): CFGFoodGroup(oils_and_fats=5.0),
    ("Beef", "55g"): CFGFoodGroup(meat_and_alternatives=0.75),
    ("Bread", "35g"): CFGFoodGroup(grain_products=1.0),
    ("Apple", "1 medium"): CFGFoodGroup(vegetables_and_fruits=1.0),
    ("Milk", "250ml"): CFGFoodGroup(milk_and_alternatives=1.0),
}

NUTRIENT_UNITS = {
    ENERGY: "kCal",
    PROTEIN: "g",
    FAT: "g",
    CARBOHYDRATE: "g",
    FIBRE: "g",
    SODIUM: "mg",
    IRON: "mg",
    CALCIUM: "mg",
}


def make_meal(
    day: date, meal_type: MealType = MealType.LUNCH, *items: FoodItem
) -> Meal:
    return Meal(eaten_at=day, meal_type=meal_type, items=items)


@dataclass
class InMemoryMealLogRepository(MealLogRepository):
    """In-memory meal log for tests."""

    meals: dict[UUID, list[Meal]] = field(default_factory=dict)
    fetch_calls: list[tuple[UUID, date, date]] = field(default_factory=list)
    fail_with: Exception | None = None

    def add(self, user_id: UUID, *meals: Meal) -> None:
        self.meals.setdefault(user_id, []).extend(meals)

    def fetch_meals(self, user_id: UUID, start: date, end: date) -> list[Meal]:
        if self.fail_with is not None:
            raise self.fail_with
        self.fetch_calls.append((user_id, start, end))
        return sorted(
            (
                meal
                for meal in self.meals.get(user_id, [])
                if start <= meal.day <= end
            ),
            key=lambda meal: meal.day,
        )

    def save_meal(self, user_id: UUID, meal: Meal) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.add(user_id, meal)


@dataclass
class FakeNutritionSource(NutritionSource):
    """Table-driven nutrition source scaling per-unit profiles."""

    unit_nutrients: dict[tuple[str, str], dict[str, float]] = field(
        default_factory=lambda: dict(UNIT_NUTRIENTS)
    )
    unit_servings: dict[tuple[str, str], CFGFoodGroup] = field(
        default_factory=lambda: dict(UNIT_SERVINGS)
    )
    units: dict[str, str] = field(default_factory=lambda: dict(NUTRIENT_UNITS))
    nutrition_calls: int = 0

    def meal_nutrition(self, meal: Meal) -> Nutrition:
        self.nutrition_calls += 1
        total = Nutrition()
        for item in meal.items:
            per_unit = Nutrition(self.unit_nutrients.get((item.name, item.unit), {}))
            total = total + per_unit.scaled(item.quantity)
        return total

    def meal_food_guide_servings(self, meal: Meal) -> CFGFoodGroup:
        total = CFGFoodGroup()
        for item in meal.items:
            per_unit = self.unit_servings.get((item.name, item.unit), CFGFoodGroup())
            total = total + per_unit.scaled(item.quantity)
        return total

    def nutrient_unit(self, nutrient: str) -> str:
        if nutrient not in self.units:
            raise LookupError(nutrient)
        return self.units[nutrient]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def meal_repository() -> InMemoryMealLogRepository:
    return InMemoryMealLogRepository()


@pytest.fixture
def nutrition_source() -> FakeNutritionSource:
    return FakeNutritionSource()


@pytest.fixture
def container(
    settings: Settings,
    meal_repository: InMemoryMealLogRepository,
    nutrition_source: FakeNutritionSource,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        meal_log_repository=meal_repository,
        nutrition_source=nutrition_source,
        session_registry=AnalysisSessionRegistry(
            repository=meal_repository,
            nutrition_source=nutrition_source,
            change_epsilon=settings.change_epsilon,
            all_time_start=settings.all_time_start,
            all_time_end=settings.all_time_end,
            max_sessions=settings.max_sessions,
        ),
    )
