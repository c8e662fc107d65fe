"""FastAPI application for meal analysis."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from meal_insights.api.analysis import router as analysis_router
from meal_insights.app_logging import configure_logging
from meal_insights.containers import AppContainer
from meal_insights.domain.analysis import AnalysisError, AnalysisFailure
from meal_insights.domain.projections import UnsupportedProjectionError

_FAILURE_STATUS = {
    AnalysisFailure.INVALID_RANGE: 422,
    AnalysisFailure.NO_MEALS: 404,
    AnalysisFailure.NO_APPLICABLE_SWAPS: 404,
    AnalysisFailure.COLLABORATOR_FAILURE: 502,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container

    app.include_router(analysis_router)

    @app.exception_handler(AnalysisError)
    async def analysis_error_handler(
        request: Request, exc: AnalysisError
    ) -> JSONResponse:
        logger.info(
            "Analysis failed: path=%s failure=%s", request.url.path, exc.failure.value
        )
        return JSONResponse(
            status_code=_FAILURE_STATUS[exc.failure],
            content={
                "detail": {"failure": exc.failure.value, "message": exc.message}
            },
        )

    @app.exception_handler(UnsupportedProjectionError)
    async def unsupported_projection_handler(
        request: Request, exc: UnsupportedProjectionError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
