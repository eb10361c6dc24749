"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from app.schemas import (
    DatabaseState,
    HealthResponse,
    MetricsResponse,
    SeedErrorResponse,
    SeedResponse,
    format_timestamp,
    serialize_rows,
)
from datastore.base import MeasurementStore, StoreError
from services.query import QueryService, QueryValidationError
from services.seeder import SeedGenerator

API_VERSION = "1.0.0"

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_store(request: Request) -> MeasurementStore:
    return request.app.state.store


def get_query_service(store: MeasurementStore = Depends(get_store)) -> QueryService:
    return QueryService(store)


def get_seed_generator(store: MeasurementStore = Depends(get_store)) -> SeedGenerator:
    return SeedGenerator(store)


def _store_failure(exc: StoreError, action: str) -> HTTPException:
    logger.error("Failed to %s", action, extra={"error": str(exc)})
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
    )


@router.get(
    "/measurements",
    summary="List measurements for one field, oldest first, at most 100 rows.",
)
def list_measurements(
    field: str = "temperature",
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    service: QueryService = Depends(get_query_service),
) -> List[Dict[str, Any]]:
    try:
        rows = service.list_measurements(field, start_date, end_date)
    except QueryValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.message,
        ) from exc
    except StoreError as exc:
        raise _store_failure(exc, "fetch measurements") from exc
    return serialize_rows(rows)


@router.get(
    "/measurements/metrics",
    response_model=MetricsResponse,
    summary="Average, min, max, population stdDev and count over the full range.",
)
def get_metrics(
    field: str = "temperature",
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    service: QueryService = Depends(get_query_service),
) -> MetricsResponse:
    try:
        summary = service.compute_metrics(field, start_date, end_date)
    except QueryValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.message,
        ) from exc
    except StoreError as exc:
        raise _store_failure(exc, "calculate metrics") from exc
    return MetricsResponse.from_summary(summary)


@router.post(
    "/measurements/seed",
    response_model=SeedResponse,
    responses={500: {"model": SeedErrorResponse}},
    summary="Append 30 days of hourly synthetic measurements.",
)
def seed_measurements(
    seeder: SeedGenerator = Depends(get_seed_generator),
) -> Any:
    try:
        result = seeder.seed_history()
    except StoreError as exc:
        logger.error("Failed to seed data", extra={"error": str(exc)})
        payload = SeedErrorResponse(error="Failed to seed data", message=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=payload.model_dump(),
        )
    return SeedResponse.from_result(result)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
def healthcheck(store: MeasurementStore = Depends(get_store)) -> HealthResponse:
    connected = store.is_connected()
    return HealthResponse(
        message="Analytics Platform API is running",
        timestamp=format_timestamp(datetime.now(timezone.utc)),
        database=DatabaseState.connected if connected else DatabaseState.disconnected,
        version=API_VERSION,
    )


@router.get("/{path:path}", include_in_schema=False)
def unknown_api_route(path: str) -> None:
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Unknown API route /api/{path}",
    )
