"""
API response models using Pydantic.
"""
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from app.domain.models import MonitoringPoint, SoilMetrics


class SoilMetricsResponse(SoilMetrics):
    """Soil reading with qualitative status bands."""
    status: Dict[str, str] = Field(
        description="Status label per reading (moisture, vegetation, nutrients)"
    )


class MonitoringPointOverview(MonitoringPoint):
    """Monitoring point with its latest classified reading."""
    latest_metrics: Optional[SoilMetricsResponse] = Field(
        default=None,
        description="Most recent reading by measurement date"
    )


class DataStatusResponse(BaseModel):
    """Health information about the monitoring data source."""
    status: str = Field(examples=["healthy"])
    service: str
    using_mock_data: bool = Field(
        description="Whether responses are currently synthesized locally"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "service": "Soil Health Monitoring Service",
                "using_mock_data": True,
            }
        }
    )
