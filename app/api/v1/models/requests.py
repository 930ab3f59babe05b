"""
API request models using Pydantic.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from app.domain.models import MonitoringPointDraft


class MonitoringPointCreate(MonitoringPointDraft):
    """Request body for creating a monitoring point."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "West Vineyard",
                "description": "Wine grape cultivation",
                "coordinates": [-122.4194, 37.7749],
                "elevation": 85,
            }
        }
    )


class SoilMetricsCreate(BaseModel):
    """Request body for recording a soil reading."""
    moisture_level: float = Field(description="Percent", examples=[62.5])
    vegetation_index: float = Field(description="NDVI, conventionally 0-1", examples=[0.61])
    soil_temperature: float = Field(description="Degrees Celsius", examples=[21.0])
    nitrogen_level: float = Field(examples=[48.0])
    phosphorus_level: float = Field(examples=[40.0])
    potassium_level: float = Field(examples=[55.0])
    ph_level: float = Field(ge=0, le=14, examples=[6.8])
    organic_matter: float = Field(description="Percent", examples=[4.2])
    measurement_date: Optional[datetime] = Field(
        default=None,
        description="When the reading was taken (defaults to now)"
    )
    data_source: Optional[str] = Field(
        default=None,
        description="Provenance label (defaults by data mode)"
    )
