"""
Infrastructure layer: Backing store client with retry logic.

Talks to a PostgREST-style table API (``/rest/v1/<table>``) and the
auth "current user" endpoint. All failures surface as ``StoreError``
subclasses; deciding what to do about them is the caller's job.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError
import httpx
import logging
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from app.config import settings
from app.domain.models import MonitoringPoint, SoilMetrics, SoilMetricsDraft
from app.infrastructure.api_constants import APIConstants, StoreEndpoints
from app.utils.coordinates import parse_coordinates

logger = logging.getLogger(__name__)


# Pydantic models for store rows
class MonitoringPointRow(BaseModel):
    """Row of the monitoring_points table."""
    id: str
    name: str
    description: Optional[str] = None
    coordinates: Optional[str] = Field(
        default=None,
        description="Location as a '<lon>,<lat>' string"
    )
    elevation: Optional[float] = None
    user_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(coerce_numbers_to_str=True)

    def to_domain(self) -> MonitoringPoint:
        """Convert the row to a domain point, decoding the coordinates."""
        return MonitoringPoint(
            id=self.id,
            name=self.name,
            description=self.description,
            coordinates=parse_coordinates(self.coordinates),
            elevation=self.elevation,
            user_id=self.user_id or "",
            created_at=self.created_at,
            updated_at=self.updated_at,
            origin="store",
        )


class StoreUser(BaseModel):
    """The principal behind the configured access token."""
    id: str
    email: Optional[str] = None

    model_config = ConfigDict(coerce_numbers_to_str=True)


class StoreError(Exception):
    """Base exception for backing store errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StoreConnectivityError(StoreError):
    """The store is unreachable, failing, or rejected the query."""
    pass


class AuthenticationRequired(StoreError):
    """A write against the store was attempted without a principal."""
    pass


class StoreClient:
    """
    Client for the monitoring data backing store.
    Implements retry logic with exponential backoff.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retry_attempts: Optional[int] = None,
        retry_min_wait: Optional[float] = None,
        retry_max_wait: Optional[float] = None,
    ):
        """
        Initialize the store client. Unset arguments fall back to settings.

        Args:
            base_url: Store base URL; empty means the store is not configured
            api_key: Project API key
            access_token: Access token of the signed-in principal
            timeout: Per-request timeout in seconds
            max_retry_attempts: Attempts for transient failures
            retry_min_wait: Minimum backoff in seconds
            retry_max_wait: Maximum backoff in seconds
        """
        self.base_url = (
            settings.store_base_url if base_url is None else base_url
        ).rstrip("/")
        self.api_key = settings.store_api_key if api_key is None else api_key
        self.access_token = (
            settings.store_access_token if access_token is None else access_token
        )
        self.timeout = settings.store_timeout_seconds if timeout is None else timeout
        self.max_retry_attempts = (
            settings.max_retry_attempts
            if max_retry_attempts is None else max_retry_attempts
        )
        self.retry_min_wait = (
            settings.retry_min_wait if retry_min_wait is None else retry_min_wait
        )
        self.retry_max_wait = (
            settings.retry_max_wait if retry_max_wait is None else retry_max_wait
        )

        bearer = self.access_token or self.api_key
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {bearer}",
                "accept": APIConstants.CONTENT_TYPE_JSON,
            },
            timeout=self.timeout,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "StoreClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an HTTP request with retry logic.

        Server errors (5xx) and transport errors, timeouts included, are
        retried. Client errors (4xx) are not.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Store endpoint path
            **kwargs: Additional arguments for the request

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            StoreConnectivityError: If the request fails after retries
        """
        if not self.is_configured:
            raise StoreConnectivityError("Store base URL is not configured")

        logger.debug(f"Store request: {method} {endpoint}")
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max(1, self.max_retry_attempts)),
                wait=wait_exponential(
                    multiplier=settings.retry_backoff_multiplier,
                    min=self.retry_min_wait,
                    max=self.retry_max_wait,
                ),
                retry=retry_if_exception_type(
                    (httpx.HTTPStatusError, httpx.RequestError)
                ),
                reraise=True,
            ):
                with attempt:
                    response = await self.client.request(method, endpoint, **kwargs)
                    if response.status_code >= 500:
                        response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreConnectivityError(
                f"Store request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise StoreConnectivityError(f"Store request error: {e!r}") from e

        if response.is_error:
            # Don't retry on client errors (4xx)
            raise StoreConnectivityError(
                f"Store request failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreConnectivityError(f"Malformed store response: {e}") from e

    async def count(self, table: str) -> int:
        """
        Run a bounded count query against a table.

        Args:
            table: Table name

        Returns:
            Row count reported by the store

        Raises:
            StoreConnectivityError: If the query fails
        """
        data = await self._make_request(
            "GET",
            StoreEndpoints.table(table),
            params={"select": "count", "limit": APIConstants.PROBE_LIMIT},
        )
        if not data:
            return 0
        return int(data[0].get("count", 0))

    async def select_monitoring_points(self) -> List[MonitoringPointRow]:
        """
        Fetch all monitoring points, newest first.

        Returns:
            List of MonitoringPointRow instances

        Raises:
            StoreConnectivityError: If the query fails
        """
        data = await self._make_request(
            "GET",
            StoreEndpoints.monitoring_points(),
            params={"select": "*", "order": "created_at.desc"},
        )
        return self._parse_rows(MonitoringPointRow, data)

    async def insert_monitoring_point(self, record: Dict[str, Any]) -> MonitoringPointRow:
        """
        Insert a monitoring point row.

        Args:
            record: Column values, coordinates already encoded

        Returns:
            The stored row

        Raises:
            StoreConnectivityError: If the insert fails
        """
        data = await self._make_request(
            "POST",
            StoreEndpoints.monitoring_points(),
            json=[record],
            headers={"Prefer": APIConstants.PREFER_RETURN_REPRESENTATION},
        )
        rows = self._parse_rows(MonitoringPointRow, data)
        if not rows:
            raise StoreConnectivityError("Insert returned no monitoring point")
        return rows[0]

    async def select_soil_metrics(
        self,
        monitoring_point_id: str,
        limit: int = APIConstants.DEFAULT_METRICS_LIMIT,
    ) -> List[SoilMetrics]:
        """
        Fetch soil metrics for a point, most recent measurement first.

        Args:
            monitoring_point_id: Point to fetch metrics for
            limit: Maximum number of rows

        Returns:
            List of SoilMetrics instances

        Raises:
            StoreConnectivityError: If the query fails
        """
        data = await self._make_request(
            "GET",
            StoreEndpoints.soil_metrics(),
            params={
                "select": "*",
                "monitoring_point_id": f"eq.{monitoring_point_id}",
                "order": "measurement_date.desc",
                "limit": limit,
            },
        )
        return self._parse_rows(SoilMetrics, data)

    async def insert_soil_metrics(self, record: SoilMetricsDraft) -> SoilMetrics:
        """
        Insert a soil metrics row.

        Args:
            record: Reading to store

        Returns:
            The stored row with id and created_at

        Raises:
            StoreConnectivityError: If the insert fails
        """
        data = await self._make_request(
            "POST",
            StoreEndpoints.soil_metrics(),
            json=[record.model_dump(mode="json")],
            headers={"Prefer": APIConstants.PREFER_RETURN_REPRESENTATION},
        )
        rows = self._parse_rows(SoilMetrics, data)
        if not rows:
            raise StoreConnectivityError("Insert returned no soil metrics")
        return rows[0]

    async def get_current_user(self) -> StoreUser:
        """
        Resolve the principal behind the configured access token.

        Returns:
            StoreUser instance

        Raises:
            AuthenticationRequired: If there is no token or it is rejected
            StoreConnectivityError: If the auth endpoint fails otherwise
        """
        if not self.access_token:
            raise AuthenticationRequired("User not authenticated")

        try:
            data = await self._make_request("GET", StoreEndpoints.CURRENT_USER)
        except StoreConnectivityError as e:
            if e.status_code in (401, 403):
                raise AuthenticationRequired(
                    "User not authenticated", status_code=e.status_code
                ) from e
            raise

        if not data or not data.get("id"):
            raise AuthenticationRequired("User not authenticated")
        return StoreUser(**data)

    def _parse_rows(self, model, data) -> list:
        """Validate a list of JSON rows into models."""
        try:
            return [model(**row) for row in (data or [])]
        except (ValidationError, TypeError) as e:
            raise StoreConnectivityError(f"Unexpected row shape: {e}") from e
