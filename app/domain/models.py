"""
Domain models for monitoring points and soil metrics.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.).
Coordinates are always held as a (longitude, latitude) pair here; the
string form only exists at the storage boundary.
"""
from datetime import datetime
from typing import Literal, Optional, Tuple
from pydantic import BaseModel, Field, field_validator

from app.utils.coordinates import validate_coordinates


PointOrigin = Literal["store", "mock"]


class MonitoringPointDraft(BaseModel):
    """Fields supplied by the caller when creating a monitoring point."""
    name: str = Field(min_length=1)
    description: Optional[str] = None
    coordinates: Tuple[float, float] = Field(
        description="(longitude, latitude) in degrees"
    )
    elevation: Optional[float] = Field(default=None, description="Meters")

    @field_validator("coordinates")
    @classmethod
    def check_coordinates(cls, value: Tuple[float, float]) -> Tuple[float, float]:
        return validate_coordinates(*value)


class MonitoringPoint(MonitoringPointDraft):
    """A named location tracked for soil conditions."""
    id: str
    user_id: str = Field(description="Identifier of the creating principal")
    created_at: datetime
    updated_at: datetime
    origin: PointOrigin = Field(
        default="store",
        description="Whether the point came from the store or was synthesized"
    )

    @property
    def is_mock(self) -> bool:
        return self.origin == "mock"


class SoilMetricsDraft(BaseModel):
    """A soil reading before the store assigns an id."""
    monitoring_point_id: str
    moisture_level: float = Field(description="Percent")
    vegetation_index: float = Field(description="NDVI, conventionally 0-1")
    soil_temperature: float = Field(description="Degrees Celsius")
    nitrogen_level: float
    phosphorus_level: float
    potassium_level: float
    ph_level: float = Field(ge=0, le=14)
    organic_matter: float = Field(description="Percent")
    measurement_date: datetime
    data_source: str


class SoilMetrics(SoilMetricsDraft):
    """An immutable soil reading tied to one monitoring point."""
    id: str
    created_at: datetime


class MonitoringPointWithMetrics(MonitoringPoint):
    """Monitoring point paired with its most recent reading."""
    latest_metrics: Optional[SoilMetrics] = None
