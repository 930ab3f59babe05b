"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample store rows
- Seeded mock data generator
- Store client pointed at a respx-mocked store
- Mock store client
- FastAPI test client
"""
from typing import AsyncGenerator

import numpy as np
import pytest
import respx
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from app.main import app
from app.infrastructure.store_client import StoreClient, StoreConnectivityError
from app.services.application.monitoring_data_store import MonitoringDataStore
from app.services.domain.mock_data_generator import MockDataGenerator
from tests.helpers import FIXED_NOW, STORE_URL, make_point_row


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def stored_points() -> list[dict]:
    """Three real (non-mock) monitoring points, newest first."""
    return [
        make_point_row("p-3", "Lake Side", "-84.388,33.749"),
        make_point_row("p-2", "Central Farm", "-95.7129,37.0902"),
        make_point_row("p-1", "West Vineyard", "-122.4194,37.7749"),
    ]


@pytest.fixture
def metrics_draft_payload() -> dict:
    """Field values for a SoilMetricsDraft."""
    return {
        "monitoring_point_id": "mock-1",
        "moisture_level": 55.0,
        "vegetation_index": 0.6,
        "soil_temperature": 22.0,
        "nitrogen_level": 50.0,
        "phosphorus_level": 42.0,
        "potassium_level": 61.0,
        "ph_level": 6.5,
        "organic_matter": 3.8,
        "measurement_date": FIXED_NOW,
        "data_source": "Demo Data",
    }


# ============================================================
# Store Fixtures
# ============================================================

@pytest.fixture
def mock_generator() -> MockDataGenerator:
    """Mock data generator with a fixed seed and clock."""
    return MockDataGenerator(rng=np.random.default_rng(42), clock=lambda: FIXED_NOW)


@pytest.fixture
async def store_client() -> AsyncGenerator[StoreClient, None]:
    """Store client pointed at the mocked store, without retry delays."""
    client = StoreClient(
        base_url=STORE_URL,
        api_key="test-key",
        access_token="test-token",
        timeout=1.0,
        max_retry_attempts=1,
        retry_min_wait=0,
        retry_max_wait=0,
    )
    yield client
    await client.close()


@pytest.fixture
def data_store(store_client, mock_generator) -> MonitoringDataStore:
    """Data store over the mocked store."""
    return MonitoringDataStore(
        store_client=store_client,
        mock_data=mock_generator,
        probe_table="monitoring_points",
    )


@pytest.fixture
def store_api():
    """respx router standing in for the backing store."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def failing_store_client():
    """Mock store client whose every call fails."""
    mock_client = AsyncMock(spec=StoreClient)
    error = StoreConnectivityError("Store request error: ConnectTimeout()")
    mock_client.count.side_effect = error
    mock_client.select_monitoring_points.side_effect = error
    mock_client.insert_monitoring_point.side_effect = error
    mock_client.select_soil_metrics.side_effect = error
    mock_client.insert_soil_metrics.side_effect = error
    mock_client.get_current_user.side_effect = error
    return mock_client


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Test client with the application lifespan running (no store configured)."""
    with TestClient(app) as client:
        yield client
