"""Memoized meal lists for a user and date window."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol
from uuid import UUID

from meal_insights.domain.analysis import WindowKey, validate_range
from meal_insights.domain.meals import Meal
from meal_insights.services.cache import SingleEntryCache

ALL_TIME_START = date(1000, 1, 1)
ALL_TIME_END = date(9999, 12, 31)

_logger = logging.getLogger(__name__)


class MealLogRepository(Protocol):
    """Source of logged meals."""

    def fetch_meals(self, user_id: UUID, start: date, end: date) -> list[Meal]:
        """Return meals eaten within the inclusive range, empty when none."""

    def save_meal(self, user_id: UUID, meal: Meal) -> None:
        """Persist a newly logged meal."""


def resolve_window(
    user_id: UUID,
    start: date | None,
    end: date | None,
    all_time_start: date = ALL_TIME_START,
    all_time_end: date = ALL_TIME_END,
) -> WindowKey:
    """Fill unset bounds with the open all-time window."""
    return WindowKey(
        user_id=user_id,
        start=start if start is not None else all_time_start,
        end=end if end is not None else all_time_end,
    )


@dataclass
class MealWindowCache:
    """Single snapshot of the meals in one (user, start, end) window.

    Listeners are called whenever the snapshot is dropped or replaced so that
    results derived from it can be invalidated.
    """

    repository: MealLogRepository
    all_time_start: date = ALL_TIME_START
    all_time_end: date = ALL_TIME_END
    _snapshot: SingleEntryCache[WindowKey, list[Meal]] = field(
        default_factory=lambda: SingleEntryCache("meal window")
    )
    _listeners: list[Callable[[], None]] = field(default_factory=list)

    def get(
        self, user_id: UUID, start: date | None = None, end: date | None = None
    ) -> list[Meal]:
        """Return the meals for the window, fetching only on a key change."""
        validate_range(start, end)
        key = resolve_window(
            user_id, start, end, self.all_time_start, self.all_time_end
        )
        cached = self._snapshot.get(key)
        if cached is not None:
            return cached

        meals = self.repository.fetch_meals(user_id, key.start, key.end)
        _logger.info(
            "Meal window replaced: start=%s end=%s meals=%s",
            key.start,
            key.end,
            len(meals),
        )
        self._snapshot.store(key, meals)
        self._notify()
        return meals

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Register a callback run when the snapshot changes."""
        self._listeners.append(listener)

    def record_meal_logged(self, user_id: UUID, meal: Meal) -> bool:
        """Drop the snapshot if a new meal falls inside it.

        Returns True when the snapshot was invalidated.
        """
        key = self._snapshot.key
        if key is None or key.user_id != user_id or not key.contains(meal.day):
            return False
        self.invalidate()
        return True

    def invalidate(self) -> None:
        """Drop the snapshot and everything derived from it."""
        self._snapshot.invalidate()
        self._notify()

    @property
    def window(self) -> WindowKey | None:
        return self._snapshot.key

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()
