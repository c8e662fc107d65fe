"""Tests for per-user analysis sessions."""

from datetime import date
from uuid import UUID, uuid4

import pytest

from meal_insights.containers import AppContainer
from meal_insights.domain.analysis import AnalysisError, AnalysisFailure
from meal_insights.domain.meals import MealType
from meal_insights.domain.nutrition import Sex, UserProfile
from meal_insights.domain.projections import ChartKind, ViewKind
from meal_insights.services.analysis import (
    AnalysisSession,
    AnalysisSessionRegistry,
    collaborator_boundary,
)
from tests.conftest import (
    BEEF,
    BREAD,
    BUTTER,
    FakeNutritionSource,
    InMemoryMealLogRepository,
    make_meal,
)

START = date(2025, 7, 15)
END = date(2025, 7, 22)


@pytest.fixture
def session(
    meal_repository: InMemoryMealLogRepository,
    nutrition_source: FakeNutritionSource,
    user_id: UUID,
) -> AnalysisSession:
    meal_repository.add(
        user_id,
        make_meal(date(2025, 7, 18), MealType.LUNCH, BUTTER),
        make_meal(date(2025, 7, 20), MealType.DINNER, BUTTER, BREAD),
    )
    return AnalysisSession.create(user_id, meal_repository, nutrition_source)


def test_switching_views_never_recomputes(session: AnalysisSession) -> None:
    session.analyze_swap(BUTTER, BEEF, START, END)

    for view in ViewKind:
        session.project(view, ChartKind.NUTRIENT)
    session.project(ViewKind.AVERAGE, ChartKind.FOOD_GUIDE)
    session.time_series()

    assert session.swaps.compute_count == 1


def test_report_and_swap_share_the_meal_window(
    session: AnalysisSession, meal_repository: InMemoryMealLogRepository
) -> None:
    session.nutrient_intake(START, END)
    session.analyze_swap(BUTTER, BEEF, START, END)
    session.food_guide_alignment(UserProfile(Sex.MALE), START, END)

    assert len(meal_repository.fetch_calls) == 1
    assert session.reports.cache.compute_count == 1


def test_current_swap_requires_held_result(session: AnalysisSession) -> None:
    with pytest.raises(LookupError):
        session.current_swap()

    session.analyze_swap(BUTTER, BEEF, START, END)
    session.leave_swap_workflow()

    with pytest.raises(LookupError):
        session.project(ViewKind.CUMULATIVE, ChartKind.NUTRIENT)


def test_invalid_range_rejected_before_cache(
    session: AnalysisSession, meal_repository: InMemoryMealLogRepository
) -> None:
    held = session.analyze_swap(BUTTER, BEEF, START, END)

    with pytest.raises(AnalysisError) as excinfo:
        session.analyze_swap(BUTTER, BEEF, END, START)

    assert excinfo.value.failure is AnalysisFailure.INVALID_RANGE
    assert session.current_swap() is held
    assert len(meal_repository.fetch_calls) == 1


def test_collaborator_failure_is_translated(
    session: AnalysisSession, meal_repository: InMemoryMealLogRepository
) -> None:
    meal_repository.fail_with = ConnectionError("database unavailable")

    with pytest.raises(AnalysisError) as excinfo:
        session.analyze_swap(BUTTER, BEEF, START, END)

    assert excinfo.value.failure is AnalysisFailure.COLLABORATOR_FAILURE
    assert isinstance(excinfo.value.__cause__, ConnectionError)
    assert session.swaps.result is None


def test_collaborator_boundary_passes_analysis_errors() -> None:
    with pytest.raises(AnalysisError) as excinfo:
        with collaborator_boundary("test"):
            raise AnalysisError(AnalysisFailure.NO_MEALS, "empty")

    assert excinfo.value.failure is AnalysisFailure.NO_MEALS


def test_log_meal_persists_and_invalidates_window(
    session: AnalysisSession, meal_repository: InMemoryMealLogRepository
) -> None:
    before = session.nutrient_intake(START, END)
    meal = make_meal(date(2025, 7, 21), MealType.SNACK, BREAD)

    invalidated = session.log_meal(meal)
    after = session.nutrient_intake(START, END)

    assert invalidated
    assert meal in meal_repository.meals[session.user_id]
    assert after.day_count == before.day_count + 1
    assert len(meal_repository.fetch_calls) == 2


def test_log_meal_in_swap_window_refreshes_swap(session: AnalysisSession) -> None:
    held = session.analyze_swap(BUTTER, BEEF, START, END)

    session.log_meal(make_meal(date(2025, 7, 21), MealType.SNACK, BUTTER))
    report = session.nutrient_intake(START, END)
    again = session.analyze_swap(BUTTER, BEEF, START, END)

    assert again is not held
    assert len(held.changed_meals) == 2
    assert len(again.changed_meals) == 3
    assert again.day_count == report.day_count == 3
    assert session.swaps.compute_count == 2


def test_log_meal_outside_swap_window_keeps_swap(session: AnalysisSession) -> None:
    held = session.analyze_swap(BUTTER, BEEF, START, END)

    session.log_meal(make_meal(date(2025, 7, 25), MealType.SNACK, BUTTER))

    assert session.current_swap() is held


def test_log_meal_drops_all_time_swap(session: AnalysisSession) -> None:
    session.analyze_swap(BUTTER, BEEF)

    session.log_meal(make_meal(date(2030, 1, 1), MealType.SNACK, BREAD))

    assert session.swaps.result is None


def test_clear_all_resets_every_cache(session: AnalysisSession) -> None:
    session.nutrient_intake(START, END)
    session.analyze_swap(BUTTER, BEEF, START, END)

    session.clear_all()

    assert session.meal_windows.window is None
    assert session.reports.cache.key is None
    assert session.swaps.result is None


def test_registry_keeps_one_session_per_user(container: AppContainer) -> None:
    registry = container.session_registry
    first_user, second_user = uuid4(), uuid4()

    session = registry.for_user(first_user)

    assert registry.for_user(first_user) is session
    assert registry.for_user(second_user) is not session
    assert first_user in registry

    registry.end(first_user)

    assert first_user not in registry
    assert registry.for_user(first_user) is not session


def test_registry_sessions_use_container_settings(container: AppContainer) -> None:
    session = container.session_registry.for_user(uuid4())

    assert session.projector.change_epsilon == container.settings.change_epsilon
    assert session.meal_windows.all_time_end == container.settings.all_time_end


def test_registry_evicts_least_recently_used_session(
    meal_repository: InMemoryMealLogRepository,
    nutrition_source: FakeNutritionSource,
) -> None:
    registry = AnalysisSessionRegistry(
        repository=meal_repository, nutrition_source=nutrition_source, max_sessions=2
    )
    first_user, second_user, third_user = uuid4(), uuid4(), uuid4()
    first = registry.for_user(first_user)
    second = registry.for_user(second_user)
    first.meals(START, END)
    second.meals(START, END)

    registry.for_user(first_user)
    registry.for_user(third_user)

    assert first_user in registry
    assert third_user in registry
    assert second_user not in registry
    assert second.meal_windows.window is None
    assert first.meal_windows.window is not None
