"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from meal_insights.adapters.supabase_food_catalog_repository import (
    SupabaseFoodCatalogRepository,
)
from meal_insights.adapters.supabase_meal_log_repository import (
    SupabaseMealLogRepository,
)
from meal_insights.config import Settings
from meal_insights.services.analysis import AnalysisSessionRegistry
from meal_insights.services.meal_window import MealLogRepository
from meal_insights.services.nutrition import (
    CatalogNutritionCalculator,
    NutritionSource,
)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    meal_log_repository: MealLogRepository
    nutrition_source: NutritionSource
    session_registry: AnalysisSessionRegistry


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    meal_log_repository = SupabaseMealLogRepository(supabase_client)
    nutrition_source = CatalogNutritionCalculator(
        SupabaseFoodCatalogRepository(supabase_client)
    )
    session_registry = AnalysisSessionRegistry(
        repository=meal_log_repository,
        nutrition_source=nutrition_source,
        change_epsilon=resolved_settings.change_epsilon,
        all_time_start=resolved_settings.all_time_start,
        all_time_end=resolved_settings.all_time_end,
        max_sessions=resolved_settings.max_sessions,
    )
    return AppContainer(
        settings=resolved_settings,
        meal_log_repository=meal_log_repository,
        nutrition_source=nutrition_source,
        session_registry=session_registry,
    )
