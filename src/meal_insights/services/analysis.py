"""Per-user analysis sessions tying the caches and the projector together."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from meal_insights.domain.analysis import (
    AnalysisError,
    AnalysisFailure,
    AnalysisKey,
    SwapAnalysisResult,
    validate_range,
)
from meal_insights.domain.meals import FoodItem, Meal
from meal_insights.domain.nutrition import UserProfile
from meal_insights.domain.projections import (
    ChartKind,
    ProjectionPayload,
    SeriesPoint,
    ViewKind,
)
from meal_insights.domain.reports import FoodGuideReport, IntakeReport
from meal_insights.services.aggregation import AggregationEngine
from meal_insights.services.analysis_cache import SwapAnalysisCache
from meal_insights.services.meal_window import (
    ALL_TIME_END,
    ALL_TIME_START,
    MealLogRepository,
    MealWindowCache,
    resolve_window,
)
from meal_insights.services.nutrition import NutritionSource
from meal_insights.services.projection import DEFAULT_CHANGE_EPSILON, AnalysisProjector
from meal_insights.services.reports import ReportService
from meal_insights.services.swaps import SwapSimulator

DEFAULT_MAX_SESSIONS = 1000

_logger = logging.getLogger(__name__)


@contextmanager
def collaborator_boundary(action: str) -> Iterator[None]:
    """Translate collaborator exceptions into a typed analysis failure."""
    try:
        yield
    except AnalysisError:
        raise
    except Exception as exc:
        _logger.exception("Collaborator failed during %s", action)
        raise AnalysisError(
            AnalysisFailure.COLLABORATOR_FAILURE, f"{action} failed"
        ) from exc


@dataclass
class AnalysisSession:
    """One user's interactive analysis state.

    Every operation is synchronous; a session must only be used by one
    caller at a time.
    """

    user_id: UUID
    meal_windows: MealWindowCache
    reports: ReportService
    swaps: SwapAnalysisCache
    projector: AnalysisProjector

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        user_id: UUID,
        repository: MealLogRepository,
        nutrition_source: NutritionSource,
        *,
        change_epsilon: float = DEFAULT_CHANGE_EPSILON,
        all_time_start: date = ALL_TIME_START,
        all_time_end: date = ALL_TIME_END,
    ) -> "AnalysisSession":
        """Wire a session with fresh caches."""
        meal_windows = MealWindowCache(
            repository, all_time_start=all_time_start, all_time_end=all_time_end
        )
        engine = AggregationEngine(nutrition_source)
        return cls(
            user_id=user_id,
            meal_windows=meal_windows,
            reports=ReportService(meal_windows, engine, user_id),
            swaps=SwapAnalysisCache(SwapSimulator(meal_windows, engine), user_id),
            projector=AnalysisProjector(change_epsilon),
        )

    def meals(self, start: date | None = None, end: date | None = None) -> list[Meal]:
        """Return the meals in the window."""
        validate_range(start, end)
        with collaborator_boundary("meal fetch"):
            return self.meal_windows.get(self.user_id, start, end)

    def nutrient_intake(
        self, start: date | None = None, end: date | None = None
    ) -> IntakeReport:
        validate_range(start, end)
        with collaborator_boundary("nutrient intake report"):
            return self.reports.nutrient_intake(start, end)

    def food_guide_alignment(
        self,
        profile: UserProfile,
        start: date | None = None,
        end: date | None = None,
    ) -> FoodGuideReport:
        validate_range(start, end)
        with collaborator_boundary("food guide report"):
            return self.reports.food_guide_alignment(profile, start, end)

    def analyze_swap(
        self,
        item_to_swap: FoodItem,
        replacement: FoodItem,
        start: date | None = None,
        end: date | None = None,
    ) -> SwapAnalysisResult:
        """Return the analysis for the swap, simulating only on a key change.

        The quantities of the two items fix the swap ratio for the whole
        window.
        """
        validate_range(start, end)
        key = AnalysisKey(
            item_to_swap=item_to_swap, replacement=replacement, start=start, end=end
        )
        with collaborator_boundary("swap analysis"):
            return self.swaps.get_or_compute(key)

    def current_swap(self) -> SwapAnalysisResult:
        """Return the held swap analysis; raise LookupError when none is held."""
        result = self.swaps.result
        if result is None:
            raise LookupError("No swap analysis is held for this session")
        return result

    def project(self, view: ViewKind, chart: ChartKind) -> ProjectionPayload:
        """Project the held swap analysis; switching views never recomputes."""
        return self.projector.project(self.current_swap(), view, chart)

    def time_series(self) -> list[SeriesPoint]:
        return self.projector.time_series(self.current_swap())

    def log_meal(self, meal: Meal) -> bool:
        """Persist a meal and drop cached windows that contain its day."""
        with collaborator_boundary("meal logging"):
            self.meal_windows.repository.save_meal(self.user_id, meal)
        return self.record_meal_logged(meal)

    def record_meal_logged(self, meal: Meal) -> bool:
        """Drop every cached result whose window contains the meal's day.

        Returns True when the meal window snapshot was invalidated.
        """
        invalidated = self.meal_windows.record_meal_logged(self.user_id, meal)
        key = self.swaps.key
        if key is not None:
            swap_window = resolve_window(
                self.user_id,
                key.start,
                key.end,
                self.meal_windows.all_time_start,
                self.meal_windows.all_time_end,
            )
            if swap_window.contains(meal.day):
                _logger.info("Held swap analysis dropped after meal on %s", meal.day)
                self.swaps.invalidate()
        return invalidated

    def leave_swap_workflow(self) -> None:
        """Discard the held swap analysis."""
        self.swaps.invalidate()

    def clear_all(self) -> None:
        """Reset every cache of the session."""
        self.swaps.invalidate()
        self.reports.invalidate()
        self.meal_windows.invalidate()
        _logger.info("Analysis caches cleared for user %s", self.user_id)


@dataclass
class AnalysisSessionRegistry:
    """Keeps one analysis session per user."""

    repository: MealLogRepository
    nutrition_source: NutritionSource
    change_epsilon: float = DEFAULT_CHANGE_EPSILON
    all_time_start: date = ALL_TIME_START
    all_time_end: date = ALL_TIME_END
    max_sessions: int = DEFAULT_MAX_SESSIONS
    _sessions: dict[UUID, AnalysisSession] = field(default_factory=dict)

    def for_user(self, user_id: UUID) -> AnalysisSession:
        """Return the user's session, creating it on first use.

        The least recently used session is cleared and dropped once more than
        ``max_sessions`` are held.
        """
        session = self._sessions.pop(user_id, None)
        if session is None:
            session = AnalysisSession.create(
                user_id,
                self.repository,
                self.nutrition_source,
                change_epsilon=self.change_epsilon,
                all_time_start=self.all_time_start,
                all_time_end=self.all_time_end,
            )
        self._sessions[user_id] = session
        self._evict()
        return session

    def end(self, user_id: UUID) -> None:
        """Clear and drop the user's session, if any."""
        session = self._sessions.pop(user_id, None)
        if session is not None:
            session.clear_all()

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions

    def _evict(self) -> None:
        while len(self._sessions) > self.max_sessions:
            oldest = next(iter(self._sessions))
            _logger.info("Evicting analysis session for user %s", oldest)
            self.end(oldest)
