"""FastAPI application entrypoint for the census service."""

from __future__ import annotations

from typing import Iterable

from fastapi import APIRouter, Depends, FastAPI, Request, status

from shared.http.errors import register_exception_handlers
from shared.observability.middleware import CorrelationIdMiddleware, RequestTimingMiddleware

from .config import Settings, get_settings
from .errors import UnknownColumnError, UnknownProfileError
from .logging import census_logging_context, configure_logging, get_logger
from .models.profile import ReportProfile
from .models.sorting import SortColumn, reset_sort, toggle_sort
from .pipelines.census_pipeline import CensusPipeline
from .schemas import (
    ArrangeRequest,
    ArrangeResponse,
    ProfileResponse,
    SortKeyModel,
    SortKeysResponse,
    ToggleSortRequest,
)

logger = get_logger(__name__)


def _resolve_profile(settings: Settings) -> ReportProfile:
    try:
        return settings.resolve_profile()
    except KeyError as exc:
        raise UnknownProfileError(settings.parser.profile, detail=str(exc.args[0])) from exc


def _require_columns(profile: ReportProfile, columns: Iterable[SortColumn]) -> None:
    for column in columns:
        if column not in profile.columns:
            raise UnknownColumnError(column.value, profile=profile.name)


def get_pipeline(request: Request) -> CensusPipeline:
    """Return the pipeline bound to the running application."""

    return request.app.state.pipeline


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance."""

    resolved_settings = settings or get_settings()
    app_settings = resolved_settings.app
    view_settings = resolved_settings.view

    configure_logging(
        service_name=app_settings.service_name,
        level=resolved_settings.logging.level,
        json_logs=resolved_settings.logging.json_format,
    )
    profile = _resolve_profile(resolved_settings)

    application = FastAPI(title="Census Service")
    application.state.pipeline = CensusPipeline(profile)
    application.add_middleware(RequestTimingMiddleware)
    application.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(application)

    @application.get("/health", tags=["health"], summary="Service health check")
    async def health() -> dict[str, str]:
        """Return a simple health payload for orchestration checks."""

        return {"status": "ok", "service": app_settings.service_name}

    router = APIRouter(prefix="/census", tags=["census"])

    @router.get("/profile", response_model=ProfileResponse)
    async def read_profile(pipeline: CensusPipeline = Depends(get_pipeline)) -> ProfileResponse:
        """Describe the active report layout: columns, default order, room shapes."""

        return ProfileResponse.from_profile(pipeline.profile)

    @router.post("/arrange", response_model=ArrangeResponse, status_code=status.HTTP_200_OK)
    async def arrange_census(
        payload: ArrangeRequest,
        pipeline: CensusPipeline = Depends(get_pipeline),
    ) -> ArrangeResponse:
        """Parse pasted census text and return the ordered, decorated rows."""

        keys = None
        if payload.sort_keys is not None:
            _require_columns(pipeline.profile, (key.column for key in payload.sort_keys))
            keys = [key.to_domain() for key in payload.sort_keys]

        prioritize = (
            view_settings.prioritize_low_los
            if payload.prioritize_low_los is None
            else payload.prioritize_low_los
        )
        marking = payload.marking_mode or view_settings.marking_mode

        with census_logging_context(profile=pipeline.profile.name):
            view = pipeline.build(
                payload.text,
                keys,
                prioritize_low_los=prioritize,
                marking=marking,
            )
        return ArrangeResponse.from_view(view)

    @router.post("/sort/toggle", response_model=SortKeysResponse)
    async def toggle_sort_key(
        payload: ToggleSortRequest,
        pipeline: CensusPipeline = Depends(get_pipeline),
    ) -> SortKeysResponse:
        """Flip a column's direction, or make it the ascending primary key."""

        _require_columns(
            pipeline.profile,
            [payload.column, *(key.column for key in payload.sort_keys)],
        )
        keys = toggle_sort([key.to_domain() for key in payload.sort_keys], payload.column)
        logger.info("census_sort_toggled", column=payload.column.value, key_count=len(keys))
        return SortKeysResponse(sort_keys=[SortKeyModel.from_domain(key) for key in keys])

    @router.post("/sort/reset", response_model=SortKeysResponse)
    async def reset_sort_keys(pipeline: CensusPipeline = Depends(get_pipeline)) -> SortKeysResponse:
        """Return the profile's default sort order."""

        keys = reset_sort(pipeline.profile)
        return SortKeysResponse(sort_keys=[SortKeyModel.from_domain(key) for key in keys])

    application.include_router(router)
    return application


settings = get_settings()
app = create_app(settings=settings)

__all__ = [
    "app",
    "create_app",
    "get_pipeline",
    "settings",
]


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(
        "services.census.app.main:app",
        host=settings.app.host,
        port=settings.app.port,
    )
