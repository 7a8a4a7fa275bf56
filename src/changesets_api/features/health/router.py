"""Operational liveness/readiness endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from changesets_api.api.deps import ReadSessionDep, SettingsDep
from changesets_api.common.problem_details import ApiError
from changesets_api.common.time import utc_now

from .schemas import HealthCheckResponse, HealthComponentStatus

router = APIRouter()


def _api_component(version: str) -> HealthComponentStatus:
    return HealthComponentStatus(name="api", status="available", detail=f"v{version}")


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Service liveness probe",
    response_model_exclude_none=True,
)
def read_liveness(settings: SettingsDep) -> HealthCheckResponse:
    """Return liveness status without touching the database."""

    return HealthCheckResponse(
        status="ok",
        timestamp=utc_now(),
        components=[_api_component(settings.app_version)],
    )


@router.get(
    "/ready",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Service readiness probe",
    response_model_exclude_none=True,
)
def read_readiness(settings: SettingsDep, db: ReadSessionDep) -> HealthCheckResponse:
    """Return readiness status after checking the database."""

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise ApiError(
            error_type="service_unavailable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from exc

    return HealthCheckResponse(
        status="ok",
        timestamp=utc_now(),
        components=[
            _api_component(settings.app_version),
            HealthComponentStatus(name="database", status="available"),
        ],
    )


__all__ = ["router"]
