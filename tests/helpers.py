"""
Store row builders and respx routes shared by the test modules.
"""
import itertools
import json
from datetime import datetime, timezone

import httpx


STORE_URL = "https://store.test"
STORE_HOST = "store.test"
POINTS_PATH = "/rest/v1/monitoring_points"
METRICS_PATH = "/rest/v1/soil_metrics"
USER_PATH = "/auth/v1/user"

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================
# Row Builders
# ============================================================

def make_point_row(point_id, name: str, coordinates: str, **overrides) -> dict:
    """Build a monitoring_points row as the store returns it."""
    row = {
        "id": point_id,
        "name": name,
        "description": f"{name} description",
        "coordinates": coordinates,
        "elevation": 100.0,
        "user_id": "user-1",
        "created_at": "2024-05-01T10:00:00+00:00",
        "updated_at": "2024-05-01T10:00:00+00:00",
    }
    row.update(overrides)
    return row


def make_metrics_row(metric_id: str, point_id: str, measurement_date: str, **overrides) -> dict:
    """Build a soil_metrics row as the store returns it."""
    row = {
        "id": metric_id,
        "monitoring_point_id": point_id,
        "moisture_level": 55.0,
        "vegetation_index": 0.62,
        "soil_temperature": 21.5,
        "nitrogen_level": 48.0,
        "phosphorus_level": 40.0,
        "potassium_level": 57.0,
        "ph_level": 6.7,
        "organic_matter": 4.1,
        "measurement_date": measurement_date,
        "data_source": "Satellite Analysis",
        "created_at": "2024-05-02T08:00:00+00:00",
    }
    row.update(overrides)
    return row


# ============================================================
# Store Routes
# ============================================================

def route_probe(store_api, response: httpx.Response = None):
    """Route the connectivity probe (count query on monitoring_points)."""
    return store_api.get(
        host=STORE_HOST, path=POINTS_PATH, params__contains={"select": "count"}
    ).mock(return_value=response or httpx.Response(200, json=[{"count": 3}]))


def route_points(store_api, response: httpx.Response):
    """Route the monitoring point listing."""
    return store_api.get(
        host=STORE_HOST, path=POINTS_PATH, params__contains={"select": "*"}
    ).mock(return_value=response)


def route_metrics(store_api, response: httpx.Response):
    """Route the soil metrics listing."""
    return store_api.get(host=STORE_HOST, path=METRICS_PATH).mock(return_value=response)


def route_point_inserts(store_api):
    """Route monitoring point inserts, echoing the row with a new id."""
    ids = itertools.count(1)

    def echo(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)[0]
        return httpx.Response(201, json=[{
            **body,
            "id": f"new-{next(ids)}",
            "created_at": FIXED_NOW.isoformat(),
            "updated_at": FIXED_NOW.isoformat(),
        }])

    return store_api.post(host=STORE_HOST, path=POINTS_PATH).mock(side_effect=echo)


def route_metrics_inserts(store_api):
    """Route soil metrics inserts, echoing the row with a new id."""
    ids = itertools.count(1)

    def echo(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)[0]
        return httpx.Response(201, json=[{
            **body,
            "id": f"metric-new-{next(ids)}",
            "created_at": FIXED_NOW.isoformat(),
        }])

    return store_api.post(host=STORE_HOST, path=METRICS_PATH).mock(side_effect=echo)


def route_user(store_api, response: httpx.Response = None):
    """Route the current-user lookup."""
    return store_api.get(host=STORE_HOST, path=USER_PATH).mock(
        return_value=response or httpx.Response(
            200, json={"id": "user-1", "email": "grower@example.com"}
        )
    )
