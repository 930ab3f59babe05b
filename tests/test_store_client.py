"""
Unit tests for the backing store client.

Tests cover:
- Client configuration
- Table queries and inserts
- Retry logic on 5xx errors
- No retry on 4xx errors
- Timeouts and transport errors
- Current-user lookup
"""
import json

import httpx
import pytest
from unittest.mock import AsyncMock

from app.domain.models import SoilMetrics, SoilMetricsDraft
from app.infrastructure.store_client import (
    AuthenticationRequired,
    MonitoringPointRow,
    StoreClient,
    StoreConnectivityError,
)
from app.utils.coordinates import FALLBACK_COORDINATES
from tests.helpers import (
    METRICS_PATH,
    POINTS_PATH,
    STORE_HOST,
    STORE_URL,
    make_metrics_row,
    make_point_row,
    route_point_inserts,
    route_probe,
    route_points,
    route_user,
)


# ============================================================
# Client Initialization Tests
# ============================================================

class TestStoreClientInitialization:
    """Tests for store client initialization."""

    @pytest.mark.asyncio
    async def test_client_initialization(self, store_client):
        """Client should initialize with the given configuration."""
        assert store_client.base_url == STORE_URL
        assert store_client.is_configured
        assert store_client.client.headers["apikey"] == "test-key"
        assert store_client.client.headers["Authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    async def test_api_key_used_as_bearer_without_token(self):
        client = StoreClient(base_url=STORE_URL, api_key="anon-key", access_token="")
        assert client.client.headers["Authorization"] == "Bearer anon-key"
        await client.close()

    @pytest.mark.asyncio
    async def test_unconfigured_client_fails_without_network(self, store_api):
        """An empty base URL should fail fast as a connectivity error."""
        client = StoreClient(base_url="")

        assert not client.is_configured
        with pytest.raises(StoreConnectivityError, match="not configured"):
            await client.count("monitoring_points")

        assert store_api.calls.call_count == 0
        await client.close()


# ============================================================
# Async Context Manager Tests
# ============================================================

class TestAsyncContextManager:
    """Tests for async context manager functionality."""

    @pytest.mark.asyncio
    async def test_context_manager_enter(self):
        """__aenter__ should return the client instance."""
        client = StoreClient(base_url=STORE_URL)

        async with client as ctx_client:
            assert ctx_client is client

    @pytest.mark.asyncio
    async def test_context_manager_exit_closes_client(self):
        """__aexit__ should close the HTTP client."""
        client = StoreClient(base_url=STORE_URL)
        client.close = AsyncMock()

        async with client:
            pass

        client.close.assert_called_once()


# ============================================================
# Query Tests
# ============================================================

class TestQueries:
    """Tests for table queries and inserts."""

    @pytest.mark.asyncio
    async def test_count_probe(self, store_client, store_api):
        """count should issue a bounded count query."""
        route = route_probe(store_api, httpx.Response(200, json=[{"count": 7}]))

        assert await store_client.count("monitoring_points") == 7
        request = route.calls.last.request
        assert request.url.params["limit"] == "1"

    @pytest.mark.asyncio
    async def test_select_monitoring_points(self, store_client, store_api, stored_points):
        """Listing should request newest first and decode coordinates."""
        route = route_points(store_api, httpx.Response(200, json=stored_points))

        rows = await store_client.select_monitoring_points()

        assert [row.id for row in rows] == ["p-3", "p-2", "p-1"]
        assert route.calls.last.request.url.params["order"] == "created_at.desc"
        point = rows[1].to_domain()
        assert point.coordinates == (-95.7129, 37.0902)
        assert point.origin == "store"

    def test_row_with_malformed_coordinates_uses_fallback(self):
        row = MonitoringPointRow(**make_point_row("p-9", "Broken", "not,numbers"))
        assert row.to_domain().coordinates == FALLBACK_COORDINATES

    def test_row_accepts_numeric_ids(self):
        row = MonitoringPointRow(**make_point_row(42, "Numbered", "1.0,2.0"))
        assert row.id == "42"

    @pytest.mark.asyncio
    async def test_insert_monitoring_point(self, store_client, store_api):
        """Inserts should post a one-row list and ask for the stored row back."""
        route = route_point_inserts(store_api)

        row = await store_client.insert_monitoring_point({
            "name": "Central Farm",
            "coordinates": "-95.7129,37.0902",
            "user_id": "user-1",
        })

        request = route.calls.last.request
        assert request.headers["Prefer"] == "return=representation"
        assert json.loads(request.content)[0]["coordinates"] == "-95.7129,37.0902"
        assert row.id == "new-1"

    @pytest.mark.asyncio
    async def test_select_soil_metrics(self, store_client, store_api):
        """Metrics should be filtered by point and ordered by measurement date."""
        route = store_api.get(host=STORE_HOST, path=METRICS_PATH).mock(
            return_value=httpx.Response(200, json=[
                make_metrics_row("m-1", "p-1", "2024-05-02T08:00:00+00:00"),
            ])
        )

        metrics = await store_client.select_soil_metrics("p-1", limit=10)

        params = route.calls.last.request.url.params
        assert params["monitoring_point_id"] == "eq.p-1"
        assert params["order"] == "measurement_date.desc"
        assert params["limit"] == "10"
        assert isinstance(metrics[0], SoilMetrics)

    @pytest.mark.asyncio
    async def test_insert_soil_metrics(self, store_client, store_api, metrics_draft_payload):
        store_api.post(host=STORE_HOST, path=METRICS_PATH).mock(
            return_value=httpx.Response(201, json=[
                make_metrics_row("m-9", "mock-1", "2024-06-01T12:00:00+00:00"),
            ])
        )

        stored = await store_client.insert_soil_metrics(
            SoilMetricsDraft(**metrics_draft_payload)
        )

        assert stored.id == "m-9"

    @pytest.mark.asyncio
    async def test_empty_insert_response_is_an_error(self, store_client, store_api):
        store_api.post(host=STORE_HOST, path=POINTS_PATH).mock(
            return_value=httpx.Response(201, json=[])
        )

        with pytest.raises(StoreConnectivityError):
            await store_client.insert_monitoring_point({"name": "x"})

    @pytest.mark.asyncio
    async def test_unexpected_row_shape(self, store_client, store_api):
        route_points(store_api, httpx.Response(200, json=[{"unexpected": True}]))

        with pytest.raises(StoreConnectivityError, match="Unexpected row shape"):
            await store_client.select_monitoring_points()


# ============================================================
# Error Handling Tests
# ============================================================

class TestErrorHandling:
    """Tests for error handling."""

    @pytest.mark.asyncio
    async def test_4xx_error_no_retry(self, store_api):
        """4xx errors should not trigger retry."""
        client = StoreClient(
            base_url=STORE_URL, max_retry_attempts=3, retry_min_wait=0, retry_max_wait=0
        )
        route_probe(store_api, httpx.Response(404, text="relation does not exist"))

        with pytest.raises(StoreConnectivityError, match="404") as exc_info:
            await client.count("monitoring_points")

        assert exc_info.value.status_code == 404
        assert store_api.calls.call_count == 1
        await client.close()

    @pytest.mark.asyncio
    async def test_5xx_error_triggers_retry(self, store_api):
        """5xx errors should trigger retry."""
        client = StoreClient(
            base_url=STORE_URL, max_retry_attempts=3, retry_min_wait=0, retry_max_wait=0
        )
        route = route_probe(store_api)
        route.side_effect = [
            httpx.Response(503, text="Service Unavailable"),
            httpx.Response(200, json=[{"count": 1}]),
        ]

        assert await client.count("monitoring_points") == 1
        assert store_api.calls.call_count == 2
        await client.close()

    @pytest.mark.asyncio
    async def test_5xx_after_retries_raises(self, store_api):
        client = StoreClient(
            base_url=STORE_URL, max_retry_attempts=2, retry_min_wait=0, retry_max_wait=0
        )
        route_probe(store_api, httpx.Response(500, text="boom"))

        with pytest.raises(StoreConnectivityError) as exc_info:
            await client.count("monitoring_points")

        assert exc_info.value.status_code == 500
        assert store_api.calls.call_count == 2
        await client.close()

    @pytest.mark.asyncio
    async def test_timeout_becomes_connectivity_error(self, store_client, store_api):
        """Timeouts should surface as connectivity errors."""
        route_probe(store_api).mock(side_effect=httpx.ConnectTimeout("timed out"))

        with pytest.raises(StoreConnectivityError, match="ConnectTimeout"):
            await store_client.count("monitoring_points")


# ============================================================
# Current User Tests
# ============================================================

class TestCurrentUser:
    """Tests for resolving the signed-in principal."""

    @pytest.mark.asyncio
    async def test_current_user(self, store_client, store_api):
        route_user(store_api)

        user = await store_client.get_current_user()

        assert user.id == "user-1"

    @pytest.mark.asyncio
    async def test_no_token_requires_authentication(self, store_api):
        client = StoreClient(base_url=STORE_URL, api_key="anon-key", access_token="")

        with pytest.raises(AuthenticationRequired):
            await client.get_current_user()

        assert store_api.calls.call_count == 0
        await client.close()

    @pytest.mark.asyncio
    async def test_rejected_token_requires_authentication(self, store_client, store_api):
        route_user(store_api, httpx.Response(401, json={"message": "invalid JWT"}))

        with pytest.raises(AuthenticationRequired) as exc_info:
            await store_client.get_current_user()

        assert exc_info.value.status_code == 401


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
