"""
Application service: Monitoring data access with automatic mock fallback.

Every public operation is total. When the backing store is unreachable,
failing, or empty, the store serves locally synthesized data of the same
shape instead of raising, and reports why through the logger and an
optional observer callback.
"""
import asyncio
from typing import Callable, List, Optional
import logging

from pydantic import ValidationError

from app.config import settings
from app.domain.models import (
    MonitoringPoint,
    MonitoringPointDraft,
    MonitoringPointWithMetrics,
    SoilMetrics,
    SoilMetricsDraft,
)
from app.domain.results import Fallback, Live, StoreResult
from app.infrastructure.api_constants import APIConstants
from app.infrastructure.store_client import (
    AuthenticationRequired,
    StoreClient,
    StoreConnectivityError,
)
from app.services.domain.mock_data_generator import MockDataGenerator, SAMPLE_POINTS
from app.utils.coordinates import encode_coordinates

logger = logging.getLogger(__name__)

# Called with (operation, reason) whenever data is served from the fallback path
FallbackObserver = Callable[[str, str], None]

# The only listing fallback that means "reachable, but nothing stored yet"
EMPTY_STORE_REASON = "store has no monitoring points"


class MonitoringDataStore:
    """
    Query/write surface over monitoring points and soil metrics.

    Holds a single ``using_mock_data`` flag. It is set when a connectivity
    probe or a store call fails and cleared when a probe succeeds; while it
    is set, reads and writes are served from the mock generator.
    """

    def __init__(
        self,
        store_client: StoreClient,
        mock_data: Optional[MockDataGenerator] = None,
        probe_table: Optional[str] = None,
        on_fallback: Optional[FallbackObserver] = None,
    ):
        """
        Initialize the data store with dependencies.

        Args:
            store_client: Client for the backing store
            mock_data: Generator for fallback data
            probe_table: Table used by the connectivity probe
            on_fallback: Observer notified of every fallback and its reason
        """
        self.store_client = store_client
        self.mock_data = mock_data if mock_data is not None else MockDataGenerator()
        self.probe_table = probe_table or settings.store_probe_table
        self.on_fallback = on_fallback
        self.using_mock_data = False
        self.last_fallback_reason: Optional[str] = None

    def is_using_mock_data(self) -> bool:
        return self.using_mock_data

    def _fallback(
        self,
        operation: str,
        data,
        reason: str,
        error: Optional[BaseException] = None,
    ) -> Fallback:
        """Wrap fallback data and report the reason out-of-band."""
        self.last_fallback_reason = reason
        if error is not None:
            logger.warning(
                f"{operation}: serving mock data ({reason})",
                extra={"operation": operation, "error_type": type(error).__name__},
            )
        else:
            logger.debug(f"{operation}: serving mock data ({reason})")

        if self.on_fallback is not None:
            try:
                self.on_fallback(operation, reason)
            except Exception:
                logger.exception("Fallback observer raised")
        return Fallback(data, reason)

    def _record_failure(self, error: BaseException) -> None:
        # Missing credentials say nothing about store availability
        if isinstance(error, StoreConnectivityError):
            self.using_mock_data = True

    async def check_connection(self) -> bool:
        """
        Probe the backing store with a bounded count query.

        Returns:
            True if the store answered; False otherwise (mock mode is set)
        """
        try:
            await self.store_client.count(self.probe_table)
        except Exception as e:
            self.using_mock_data = True
            self.last_fallback_reason = f"connectivity probe failed: {e}"
            logger.warning(f"Store connectivity probe failed: {e}")
            return False

        self.using_mock_data = False
        return True

    # ------------------------------------------------------------
    # Monitoring points
    # ------------------------------------------------------------

    async def _list_monitoring_points(self) -> StoreResult[List[MonitoringPoint]]:
        operation = "list_monitoring_points"
        try:
            connected = await self.check_connection()
            if not connected or self.using_mock_data:
                return self._fallback(
                    operation, self.mock_data.fixture_points(), "store unreachable"
                )

            try:
                rows = await self.store_client.select_monitoring_points()
            except Exception as e:
                self.using_mock_data = True
                return self._fallback(
                    operation, self.mock_data.fixture_points(), str(e), e
                )

            points = []
            for row in rows:
                try:
                    points.append(row.to_domain())
                except ValidationError as e:
                    logger.warning(
                        f"Skipping invalid monitoring point row {row.id}: {e}",
                        extra={"operation": operation, "row_id": row.id},
                    )

            if not rows:
                return self._fallback(
                    operation, self.mock_data.fixture_points(), EMPTY_STORE_REASON
                )
            if not points:
                return self._fallback(
                    operation,
                    self.mock_data.fixture_points(),
                    f"all {len(rows)} stored monitoring points are invalid",
                )
            return Live(points)

        except Exception as e:
            logger.exception("Unexpected error listing monitoring points")
            return self._fallback(operation, self.mock_data.fixture_points(), str(e), e)

    async def list_monitoring_points(self) -> List[MonitoringPoint]:
        """
        List monitoring points, newest first.

        Returns:
            Stored points, or the three mock fixture points if the store is
            unreachable, failing, or empty
        """
        return (await self._list_monitoring_points()).data

    async def _create_monitoring_point(
        self, draft: MonitoringPointDraft
    ) -> StoreResult[MonitoringPoint]:
        operation = "create_monitoring_point"
        if self.using_mock_data:
            return self._fallback(
                operation, self.mock_data.synthesize_point(draft), "mock mode active"
            )

        try:
            user = await self.store_client.get_current_user()
            row = await self.store_client.insert_monitoring_point({
                "name": draft.name,
                "description": draft.description,
                "coordinates": encode_coordinates(draft.coordinates),
                "elevation": draft.elevation,
                "user_id": user.id,
            })
            return Live(row.to_domain())
        except AuthenticationRequired as e:
            return self._fallback(
                operation, self.mock_data.synthesize_point(draft), str(e), e
            )
        except Exception as e:
            self._record_failure(e)
            return self._fallback(
                operation, self.mock_data.synthesize_point(draft), str(e), e
            )

    async def create_monitoring_point(self, draft: MonitoringPointDraft) -> MonitoringPoint:
        """
        Create a monitoring point.

        Writing to the store requires a signed-in principal. Without one, or
        on any store failure, the point is synthesized locally instead.

        Args:
            draft: Name, description, coordinates and elevation

        Returns:
            The created point (stored or synthesized)
        """
        return (await self._create_monitoring_point(draft)).data

    # ------------------------------------------------------------
    # Soil metrics
    # ------------------------------------------------------------

    async def _list_soil_metrics(
        self, monitoring_point_id: str, limit: int
    ) -> StoreResult[List[SoilMetrics]]:
        operation = "list_soil_metrics"
        limit = min(max(1, limit), APIConstants.MAX_METRICS_LIMIT)

        if self.using_mock_data:
            return self._fallback(
                operation,
                self.mock_data.soil_metrics_history(monitoring_point_id)[:limit],
                "mock mode active",
            )

        try:
            metrics = await self.store_client.select_soil_metrics(
                monitoring_point_id, limit
            )
            metrics = sorted(
                metrics, key=lambda m: m.measurement_date, reverse=True
            )[:limit]
        except Exception as e:
            self._record_failure(e)
            return self._fallback(
                operation,
                self.mock_data.soil_metrics_history(monitoring_point_id)[:limit],
                str(e),
                e,
            )

        if not metrics:
            return self._fallback(
                operation,
                self.mock_data.soil_metrics_history(monitoring_point_id)[:limit],
                f"no soil metrics stored for {monitoring_point_id}",
            )
        return Live(metrics)

    async def list_soil_metrics(
        self,
        monitoring_point_id: str,
        limit: int = APIConstants.DEFAULT_METRICS_LIMIT,
    ) -> List[SoilMetrics]:
        """
        List soil metrics for a point, most recent measurement first.

        Args:
            monitoring_point_id: Point to list metrics for
            limit: Maximum number of readings

        Returns:
            Stored readings, or a synthesized two-day history
        """
        return (await self._list_soil_metrics(monitoring_point_id, limit)).data

    async def _add_soil_metrics(self, record: SoilMetricsDraft) -> StoreResult[SoilMetrics]:
        operation = "add_soil_metrics"
        if self.using_mock_data:
            return self._fallback(
                operation,
                self.mock_data.synthesize_soil_metrics(record),
                "mock mode active",
            )

        try:
            return Live(await self.store_client.insert_soil_metrics(record))
        except Exception as e:
            self._record_failure(e)
            return self._fallback(
                operation, self.mock_data.synthesize_soil_metrics(record), str(e), e
            )

    async def add_soil_metrics(self, record: SoilMetricsDraft) -> SoilMetrics:
        """
        Append a soil reading.

        Args:
            record: Reading to append

        Returns:
            The stored reading, or a locally synthesized copy with an id
        """
        return (await self._add_soil_metrics(record)).data

    async def latest_soil_metrics(self, monitoring_point_id: str) -> Optional[SoilMetrics]:
        """
        Get the reading with the latest measurement date for a point.

        Args:
            monitoring_point_id: Point to look up

        Returns:
            Latest SoilMetrics, or None if there is none
        """
        try:
            metrics = await self.list_soil_metrics(monitoring_point_id, limit=1)
        except Exception:
            logger.exception(f"Error fetching latest soil metrics for {monitoring_point_id}")
            return None
        return metrics[0] if metrics else None

    async def list_monitoring_points_with_latest_metrics(
        self,
    ) -> List[MonitoringPointWithMetrics]:
        """
        List monitoring points, each paired with its latest reading.

        Latest readings are fetched concurrently. A failed per-point fetch
        leaves that point's ``latest_metrics`` empty without affecting the
        others.

        Returns:
            Points with their latest metrics
        """
        try:
            points = await self.list_monitoring_points()
            results = await asyncio.gather(
                *(self.latest_soil_metrics(point.id) for point in points),
                return_exceptions=True,
            )

            combined = []
            for point, latest in zip(points, results):
                if isinstance(latest, BaseException):
                    logger.warning(f"Latest metrics unavailable for {point.id}: {latest}")
                    latest = None
                combined.append(
                    MonitoringPointWithMetrics(**point.model_dump(), latest_metrics=latest)
                )
            return combined

        except Exception as e:
            logger.exception("Unexpected error listing points with latest metrics")
            return self._fallback(
                "list_monitoring_points_with_latest_metrics",
                self.mock_data.fixture_points_with_metrics(),
                str(e),
                e,
            ).data

    # ------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------

    async def initialize_sample_data(self) -> None:
        """
        Seed the store with sample points when it holds no real data.

        Safe to call repeatedly: nothing is created once the store returns
        real monitoring points. Any failure leaves the store in mock mode.
        """
        try:
            if not await self.check_connection():
                logger.info("Store not connected, using mock data mode")
                self.using_mock_data = True
                return

            listing = await self._list_monitoring_points()
            if not listing.is_fallback:
                logger.info(f"Store already holds {len(listing.data)} monitoring points")
                return
            if listing.reason != EMPTY_STORE_REASON:
                logger.info(f"Not seeding sample data: {listing.reason}")
                return

            logger.info("Creating initial sample data...")
            for draft in SAMPLE_POINTS:
                point = await self.create_monitoring_point(draft)
                if point.is_mock:
                    logger.warning(
                        f"Sample point '{draft.name}' was not stored; "
                        "skipping remaining sample data"
                    )
                    return
                await self.add_soil_metrics(self.mock_data.sample_metrics(point.id))

            logger.info("Sample data created successfully")

        except Exception as e:
            logger.error(f"Error initializing sample data: {e}")
            self.using_mock_data = True
