"""
API router for monitoring point and soil metrics endpoints.
"""
from datetime import datetime, timezone
from typing import Annotated, List
from fastapi import APIRouter, HTTPException, Path, Query, status

from app.api.dependencies import DataStoreDep
from app.api.v1.models.requests import MonitoringPointCreate, SoilMetricsCreate
from app.api.v1.models.responses import MonitoringPointOverview, SoilMetricsResponse
from app.domain.models import MonitoringPoint, SoilMetrics, SoilMetricsDraft
from app.infrastructure.api_constants import APIConstants
from app.services.domain.soil_status import classify_metrics


LIVE_DATA_SOURCE = "Satellite Analysis"
DEMO_DATA_SOURCE = "Demo Data"

COMMON_RESPONSES = {
    429: {"description": "Rate limit exceeded"},
}

PointId = Annotated[str, Path(description="Monitoring point identifier", min_length=1)]

router = APIRouter(
    prefix="/monitoring-points",
    tags=["monitoring-points"],
)


def _with_status(metrics: SoilMetrics) -> SoilMetricsResponse:
    return SoilMetricsResponse(**metrics.model_dump(), status=classify_metrics(metrics))


@router.get(
    "",
    response_model=List[MonitoringPoint],
    summary="List monitoring points",
    description="""
    List monitoring points, newest first.

    When the backing store is unreachable or has no points yet, the three
    demo points (North Field, South Pasture, East Orchard) are returned.
    """,
    responses=COMMON_RESPONSES,
)
async def list_monitoring_points(data_store: DataStoreDep) -> List[MonitoringPoint]:
    return await data_store.list_monitoring_points()


@router.post(
    "",
    response_model=MonitoringPoint,
    status_code=status.HTTP_201_CREATED,
    summary="Create a monitoring point",
    responses=COMMON_RESPONSES,
)
async def create_monitoring_point(
    point: MonitoringPointCreate,
    data_store: DataStoreDep,
) -> MonitoringPoint:
    """
    Create a monitoring point.

    Args:
        point: Point to create (coordinates are [longitude, latitude])
        data_store: Monitoring data store (injected dependency)

    Returns:
        The created point; ``origin`` tells whether it was stored
    """
    return await data_store.create_monitoring_point(point)


@router.get(
    "/overview",
    response_model=List[MonitoringPointOverview],
    summary="List monitoring points with their latest readings",
    responses=COMMON_RESPONSES,
)
async def get_overview(data_store: DataStoreDep) -> List[MonitoringPointOverview]:
    points = await data_store.list_monitoring_points_with_latest_metrics()
    return [
        MonitoringPointOverview(
            **point.model_dump(exclude={"latest_metrics"}),
            latest_metrics=(
                _with_status(point.latest_metrics) if point.latest_metrics else None
            ),
        )
        for point in points
    ]


@router.get(
    "/{point_id}/soil-metrics",
    response_model=List[SoilMetricsResponse],
    summary="List soil metrics for a monitoring point",
    responses=COMMON_RESPONSES,
)
async def list_soil_metrics(
    point_id: PointId,
    data_store: DataStoreDep,
    limit: Annotated[int, Query(
        ge=1,
        le=APIConstants.MAX_METRICS_LIMIT,
        description="Maximum number of readings",
    )] = APIConstants.DEFAULT_METRICS_LIMIT,
) -> List[SoilMetricsResponse]:
    metrics = await data_store.list_soil_metrics(point_id, limit=limit)
    return [_with_status(m) for m in metrics]


@router.post(
    "/{point_id}/soil-metrics",
    response_model=SoilMetricsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a soil reading",
    responses=COMMON_RESPONSES,
)
async def add_soil_metrics(
    point_id: PointId,
    reading: SoilMetricsCreate,
    data_store: DataStoreDep,
) -> SoilMetricsResponse:
    """
    Record a soil reading for a monitoring point.

    Args:
        point_id: Point the reading belongs to
        reading: Reading values; date and source are optional
        data_store: Monitoring data store (injected dependency)

    Returns:
        The recorded reading with status bands
    """
    default_source = (
        DEMO_DATA_SOURCE if data_store.is_using_mock_data() else LIVE_DATA_SOURCE
    )
    draft = SoilMetricsDraft(
        **reading.model_dump(exclude={"measurement_date", "data_source"}),
        monitoring_point_id=point_id,
        measurement_date=reading.measurement_date or datetime.now(timezone.utc),
        data_source=reading.data_source or default_source,
    )
    metrics = await data_store.add_soil_metrics(draft)
    return _with_status(metrics)


@router.get(
    "/{point_id}/soil-metrics/latest",
    response_model=SoilMetricsResponse,
    summary="Get the latest soil reading for a monitoring point",
    responses={**COMMON_RESPONSES, 404: {"description": "No readings for this point"}},
)
async def get_latest_soil_metrics(
    point_id: PointId,
    data_store: DataStoreDep,
) -> SoilMetricsResponse:
    latest = await data_store.latest_soil_metrics(point_id)
    if latest is None:
        raise HTTPException(
            status_code=404,
            detail=f"No soil metrics for monitoring point '{point_id}'"
        )
    return _with_status(latest)
