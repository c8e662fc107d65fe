"""Tests for container wiring."""

from meal_insights.adapters.supabase_meal_log_repository import (
    SupabaseMealLogRepository,
)
from meal_insights.containers import build_container
from meal_insights.services.nutrition import CatalogNutritionCalculator


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert isinstance(container.meal_log_repository, SupabaseMealLogRepository)
    assert isinstance(container.nutrition_source, CatalogNutritionCalculator)
    assert container.session_registry.change_epsilon == settings.change_epsilon
