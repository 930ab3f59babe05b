"""
Domain service: Synthesized monitoring data for mock mode.

Fixture points are literal so callers and tests can rely on them; the
soil readings are drawn from an injected random generator within
plausible agronomic ranges.
"""
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple
from uuid import uuid4
import numpy as np

from app.domain.models import (
    MonitoringPoint,
    MonitoringPointDraft,
    MonitoringPointWithMetrics,
    SoilMetrics,
    SoilMetricsDraft,
)


MOCK_ID_PREFIX = "mock-"
MOCK_FIXTURE_OWNER = "mock-user-1"
MOCK_OWNER = "mock-user"
MOCK_DATA_SOURCE = "Satellite Analysis"
SAMPLE_DATA_SOURCE = "Initial Sample"

# (moisture, vegetation index) offsets applied to the older mock reading
TREND_OFFSET = (-5.0, -0.1)

FIXTURE_POINTS: List[Dict] = [
    {
        "id": "mock-1",
        "name": "North Field",
        "description": "Main cultivation area",
        "coordinates": (-74.006, 40.7128),
        "elevation": 45.0,
    },
    {
        "id": "mock-2",
        "name": "South Pasture",
        "description": "Grazing land with good soil",
        "coordinates": (-118.2437, 34.0522),
        "elevation": 120.0,
    },
    {
        "id": "mock-3",
        "name": "East Orchard",
        "description": "Fruit tree plantation",
        "coordinates": (-87.6298, 41.8781),
        "elevation": 180.0,
    },
]

SAMPLE_POINTS: List[MonitoringPointDraft] = [
    MonitoringPointDraft(
        name="North Field",
        description="Main cultivation area",
        coordinates=(-74.006, 40.7128),
        elevation=45,
    ),
    MonitoringPointDraft(
        name="South Pasture",
        description="Grazing land",
        coordinates=(-118.2437, 34.0522),
        elevation=120,
    ),
    MonitoringPointDraft(
        name="East Orchard",
        description="Fruit trees",
        coordinates=(-87.6298, 41.8781),
        elevation=180,
    ),
]


@dataclass(frozen=True)
class ReadingRanges:
    """Uniform (low, high) bounds for each soil reading."""
    moisture_level: Tuple[float, float]
    vegetation_index: Tuple[float, float]
    soil_temperature: Tuple[float, float]
    nitrogen_level: Tuple[float, float]
    phosphorus_level: Tuple[float, float]
    potassium_level: Tuple[float, float]
    ph_level: Tuple[float, float]
    organic_matter: Tuple[float, float]


MOCK_RANGES = ReadingRanges(
    moisture_level=(60.0, 90.0),
    vegetation_index=(0.5, 0.8),
    soil_temperature=(18.0, 33.0),
    nitrogen_level=(40.0, 80.0),
    phosphorus_level=(35.0, 70.0),
    potassium_level=(45.0, 80.0),
    ph_level=(5.8, 8.2),
    organic_matter=(2.5, 7.5),
)

SAMPLE_RANGES = ReadingRanges(
    moisture_level=(50.0, 90.0),
    vegetation_index=(0.4, 0.8),
    soil_temperature=(15.0, 35.0),
    nitrogen_level=(30.0, 80.0),
    phosphorus_level=(25.0, 70.0),
    potassium_level=(40.0, 80.0),
    ph_level=(5.5, 8.5),
    organic_matter=(2.0, 8.0),
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MockDataGenerator:
    """
    Produces monitoring points and soil metrics without a backing store.

    The random source and the clock are injected so tests can pin both.
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the generator.

        Args:
            rng: Random generator for readings (fresh entropy if omitted)
            clock: Callable returning the current timestamp
        """
        self.rng = rng if rng is not None else np.random.default_rng()
        self.clock = clock

    def fixture_points(self) -> List[MonitoringPoint]:
        """Return the three fixed mock monitoring points."""
        now = self.clock()
        return [
            MonitoringPoint(
                **fixture,
                user_id=MOCK_FIXTURE_OWNER,
                created_at=now,
                updated_at=now,
                origin="mock",
            )
            for fixture in FIXTURE_POINTS
        ]

    def synthesize_point(self, draft: MonitoringPointDraft) -> MonitoringPoint:
        """Create a monitoring point locally from a draft."""
        now = self.clock()
        return MonitoringPoint(
            **draft.model_dump(),
            id=f"{MOCK_ID_PREFIX}{uuid4().hex}",
            user_id=MOCK_OWNER,
            created_at=now,
            updated_at=now,
            origin="mock",
        )

    def random_readings(self, ranges: ReadingRanges = MOCK_RANGES) -> Dict[str, float]:
        """Draw one value per reading from its range."""
        return {
            field: float(self.rng.uniform(low, high))
            for field, (low, high) in asdict(ranges).items()
        }

    def soil_metrics_history(self, monitoring_point_id: str) -> List[SoilMetrics]:
        """
        Synthesize a two-reading history for a point.

        The first reading is current; the second is one day older with
        lower moisture and vegetation index, so trends have a direction.

        Args:
            monitoring_point_id: Point the readings belong to

        Returns:
            Two SoilMetrics, most recent first
        """
        now = self.clock()
        readings = self.random_readings(MOCK_RANGES)
        moisture_offset, vegetation_offset = TREND_OFFSET

        latest = SoilMetrics(
            **readings,
            id=f"metric-{monitoring_point_id}-1",
            monitoring_point_id=monitoring_point_id,
            measurement_date=now,
            data_source=MOCK_DATA_SOURCE,
            created_at=now,
        )
        previous = latest.model_copy(update={
            "id": f"metric-{monitoring_point_id}-2",
            "measurement_date": now - timedelta(days=1),
            "moisture_level": readings["moisture_level"] + moisture_offset,
            "vegetation_index": readings["vegetation_index"] + vegetation_offset,
        })
        return [latest, previous]

    def synthesize_soil_metrics(self, record: SoilMetricsDraft) -> SoilMetrics:
        """Give a reading an id and creation time without storing it."""
        return SoilMetrics(
            **record.model_dump(),
            id=f"{MOCK_ID_PREFIX}metric-{uuid4().hex}",
            created_at=self.clock(),
        )

    def sample_metrics(self, monitoring_point_id: str) -> SoilMetricsDraft:
        """Initial reading recorded for a freshly seeded sample point."""
        return SoilMetricsDraft(
            **self.random_readings(SAMPLE_RANGES),
            monitoring_point_id=monitoring_point_id,
            measurement_date=self.clock(),
            data_source=SAMPLE_DATA_SOURCE,
        )

    def fixture_points_with_metrics(self) -> List[MonitoringPointWithMetrics]:
        """Fixture points each paired with a fresh mock reading."""
        return [
            MonitoringPointWithMetrics(
                **point.model_dump(),
                latest_metrics=self.soil_metrics_history(point.id)[0],
            )
            for point in self.fixture_points()
        ]
