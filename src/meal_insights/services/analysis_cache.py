"""Caches of aggregation results keyed by window and swap identity."""

import logging
from collections.abc import Callable
from typing import Generic, TypeVar
from uuid import UUID

from meal_insights.domain.analysis import AnalysisKey, SwapAnalysisResult
from meal_insights.services.cache import SingleEntryCache
from meal_insights.services.swaps import SwapSimulator

K = TypeVar("K")
V = TypeVar("V")

_logger = logging.getLogger(__name__)


class WindowedAggregationCache(Generic[K, V]):
    """Memoizes one aggregation result, computing it on a key change.

    The held pair is cleared before recomputing; a computation that raises
    leaves the cache empty and is never stored.
    """

    def __init__(self, compute: Callable[[K], V], name: str = "aggregation") -> None:
        self._compute = compute
        self._entry: SingleEntryCache[K, V] = SingleEntryCache(name)
        self.compute_count = 0

    def is_valid(self, key: K) -> bool:
        return self._entry.is_valid(key)

    def get_or_compute(self, key: K) -> V:
        cached = self._entry.get(key)
        if cached is not None:
            return cached
        self._entry.invalidate()
        self.compute_count += 1
        value = self._compute(key)
        self._entry.store(key, value)
        return value

    def invalidate(self) -> None:
        self._entry.invalidate()

    @property
    def key(self) -> K | None:
        return self._entry.key


class SwapAnalysisCache(WindowedAggregationCache[AnalysisKey, SwapAnalysisResult]):
    """Holds the result of the most recent swap analysis for one user."""

    def __init__(self, simulator: SwapSimulator, user_id: UUID) -> None:
        super().__init__(self._simulate, name="swap analysis")
        self.simulator = simulator
        self.user_id = user_id

    def _simulate(self, key: AnalysisKey) -> SwapAnalysisResult:
        _logger.debug("Simulating swap for key=%s", key)
        return self.simulator.simulate(
            self.user_id,
            key.item_to_swap_name,
            key.replacement,
            key.item_to_swap.quantity,
            key.replacement.quantity,
            key.start,
            key.end,
        )

    @property
    def result(self) -> SwapAnalysisResult | None:
        """Return the held result regardless of key."""
        key = self.key
        return None if key is None else self._entry.get(key)
