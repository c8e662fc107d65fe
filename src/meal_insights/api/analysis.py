"""Meal analysis API endpoints with token auth."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from meal_insights.api.models import (  # noqa: TC001
    FoodGuideRequest,
    MealPayload,
    SwapRequest,
)
from meal_insights.domain.nutrition import UserProfile
from meal_insights.domain.projections import (
    ChartKind,
    MealDelta,
    ProjectionPayload,
    SeriesPoint,
    ViewKind,
)
from meal_insights.services.reports import nutrient_distribution

if TYPE_CHECKING:
    from meal_insights.containers import AppContainer
    from meal_insights.domain.reports import FoodGuideReport, IntakeReport
    from meal_insights.services.analysis import AnalysisSession


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


router = APIRouter(
    prefix="/users/{user_id}",
    tags=["analysis"],
    dependencies=[Depends(require_api_token)],
)


def _session(user_id: UUID, request: Request) -> AnalysisSession:
    container: AppContainer = request.app.state.container
    return container.session_registry.for_user(user_id)


def _held_session(user_id: UUID, request: Request) -> AnalysisSession:
    session = _session(user_id, request)
    if session.swaps.result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No swap analysis is held; run a swap first",
        )
    return session


@router.post("/meals", status_code=status.HTTP_201_CREATED)
async def log_meal(
    user_id: UUID, payload: MealPayload, request: Request
) -> dict[str, object]:
    """Persist a meal and refresh cached windows that contain its day."""
    meal = payload.to_domain()
    invalidated = _session(user_id, request).log_meal(meal)
    return {"meal_id": str(meal.id), "window_invalidated": invalidated}


@router.get("/reports/intake")
async def intake_report(
    user_id: UUID,
    request: Request,
    start: date | None = None,
    end: date | None = None,
) -> dict[str, object]:
    """Return nutrient totals, daily averages and the macro distribution."""
    report = _session(user_id, request).nutrient_intake(start, end)
    return _format_intake(report)


@router.post("/reports/food-guide")
async def food_guide_report(
    user_id: UUID, payload: FoodGuideRequest, request: Request
) -> dict[str, object]:
    """Return average daily servings against the food guide."""
    report = _session(user_id, request).food_guide_alignment(
        UserProfile(sex=payload.sex), payload.start, payload.end
    )
    return _format_food_guide(report)


@router.post("/swaps")
async def analyze_swap(
    user_id: UUID, payload: SwapRequest, request: Request
) -> dict[str, object]:
    """Simulate a swap over the window and hold the result."""
    result = _session(user_id, request).analyze_swap(
        payload.item_to_swap.to_domain(),
        payload.replacement.to_domain(),
        payload.start,
        payload.end,
    )
    return {
        "swap_ratio": result.swap_ratio,
        "day_count": result.day_count,
        "changed_meals": len(result.changed_meals),
    }


@router.get("/swaps/current/series")
async def swap_series(user_id: UUID, request: Request) -> dict[str, object]:
    """Return per-meal original and modified values of the held swap."""
    points = _held_session(user_id, request).time_series()
    return {"points": [_format_point(point) for point in points]}


@router.get("/swaps/current/{view}")
async def swap_projection(
    user_id: UUID,
    view: ViewKind,
    request: Request,
    chart: ChartKind = ChartKind.NUTRIENT,
) -> dict[str, object]:
    """Return one view of the held swap analysis."""
    payload = _held_session(user_id, request).project(view, chart)
    return _format_projection(payload)


@router.delete("/swaps/current", status_code=status.HTTP_204_NO_CONTENT)
async def leave_swap(user_id: UUID, request: Request) -> None:
    """Discard the held swap analysis."""
    _session(user_id, request).leave_swap_workflow()


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(user_id: UUID, request: Request) -> None:
    """Clear every cache held for the user."""
    container: AppContainer = request.app.state.container
    container.session_registry.end(user_id)


def _format_intake(report: IntakeReport) -> dict[str, object]:
    return {
        "day_count": report.day_count,
        "totals": report.totals.as_dict(),
        "averages": report.averages.as_dict(),
        "units": report.units,
        "distribution": nutrient_distribution(report.averages, report.units),
    }


def _format_food_guide(report: FoodGuideReport) -> dict[str, object]:
    return {
        "day_count": report.day_count,
        "groups": [
            {
                "group": alignment.group.value,
                "actual": alignment.actual,
                "recommended": alignment.recommended,
                "percent_of_recommendation": alignment.percent_of_recommendation,
                "status": alignment.status.value,
            }
            for alignment in report.groups
        ],
    }


def _format_projection(payload: ProjectionPayload) -> dict[str, object]:
    return {
        "view": payload.view.value,
        "chart": payload.chart.value,
        "day_count": payload.day_count,
        "nutrients": [
            {
                "nutrient": row.nutrient,
                "unit": row.unit,
                "original": row.original,
                "modified": row.modified,
                "change": row.change,
                "percent_change": row.percent_change,
            }
            for row in payload.nutrients
        ],
        "food_groups": [
            {
                "group": row.group.value,
                "original": row.original,
                "modified": row.modified,
                "change": row.change,
                "percent_change": row.percent_change,
            }
            for row in payload.food_groups
        ],
        "meals": [_format_meal_delta(meal) for meal in payload.meals],
    }


def _format_meal_delta(meal: MealDelta) -> dict[str, object]:
    return {
        "meal_id": str(meal.meal_id),
        "day": meal.day.isoformat(),
        "meal_type": meal.meal_type.value,
        "nutrients": [
            {
                "nutrient": delta.nutrient,
                "unit": delta.unit,
                "original": delta.original,
                "modified": delta.modified,
                "delta": delta.delta,
                "percent_change": delta.percent_change,
            }
            for delta in meal.nutrients
        ],
    }


def _format_point(point: SeriesPoint) -> dict[str, object]:
    return {
        "day": point.key.day.isoformat(),
        "meal_type": point.key.meal_type.value,
        "nutrient": point.key.nutrient,
        "original": point.original,
        "modified": point.modified,
    }
