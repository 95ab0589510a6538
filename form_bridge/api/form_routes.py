"""Route registration for form inspection and submission endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Query, Response

from form_bridge.api.contracts import (
    ApiErrorResponse,
    HealthResponse,
    InspectFormResponse,
    SubmitFormRequest,
    SubmitFormResponse,
)
from form_bridge.core.config import AppConfig

TARGET_URL_PARAM = Query(default=None, description="Public form view URL")


@dataclass(frozen=True)
class FormRouteDeps:
    """Dependencies required to mount form routes."""

    config: AppConfig
    inspection_service: Any
    submission_service: Any
    on_shutdown: Callable[[], Awaitable[None]]


def register_form_routes(app: FastAPI, *, deps: FormRouteDeps) -> None:
    """Register health/inspect/submit endpoints and lifecycle hooks."""

    @app.on_event("shutdown")
    async def shutdown_shared_resources() -> None:
        await deps.on_shutdown()

    @app.get(
        "/api/health",
        response_model=HealthResponse,
    )
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get(
        "/api/forms/inspect",
        response_model=InspectFormResponse,
        responses={
            400: {"model": ApiErrorResponse},
            502: {"model": ApiErrorResponse},
            500: {"model": ApiErrorResponse},
        },
    )
    async def inspect_form(
        response: Response,
        url: str | None = TARGET_URL_PARAM,
    ) -> InspectFormResponse:
        result = await deps.inspection_service.inspect(url)
        max_age = deps.config.inspect.cache_max_age_seconds
        response.headers["Cache-Control"] = f"public, max-age={max_age}, s-maxage={max_age}"
        return InspectFormResponse(**result.to_dict())

    @app.post(
        "/api/forms/submit",
        response_model=SubmitFormResponse,
        responses={
            400: {"model": ApiErrorResponse},
            422: {"model": ApiErrorResponse},
            502: {"model": ApiErrorResponse},
        },
    )
    async def submit_form(body: SubmitFormRequest) -> SubmitFormResponse:
        outcome = await deps.submission_service.submit(
            action=body.action,
            answers=body.answers,
            fbzx=body.fbzx,
            hidden_params=body.hidden_params,
            origin_view_url=body.origin_view_url,
        )
        return SubmitFormResponse(**outcome)
