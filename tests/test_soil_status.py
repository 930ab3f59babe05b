"""
Unit tests for soil status classification.
"""
import pytest

from app.domain.models import SoilMetrics
from app.services.domain.soil_status import (
    classify_metrics,
    moisture_status,
    nutrient_status,
    vegetation_status,
)
from tests.helpers import make_metrics_row


@pytest.mark.parametrize("value,expected", [
    (0, "Low"),
    (29.9, "Low"),
    (30, "Moderate"),
    (59.9, "Moderate"),
    (60, "Optimal"),
    (100, "Optimal"),
])
def test_moisture_status(value, expected):
    assert moisture_status(value) == expected


@pytest.mark.parametrize("value,expected", [
    (0.1, "Poor"),
    (0.3, "Moderate"),
    (0.59, "Moderate"),
    (0.6, "Healthy"),
])
def test_vegetation_status(value, expected):
    assert vegetation_status(value) == expected


@pytest.mark.parametrize("value,expected", [
    (10, "Deficient"),
    (30, "Adequate"),
    (60, "Optimal"),
])
def test_nutrient_status(value, expected):
    assert nutrient_status(value) == expected


def test_classify_metrics():
    metrics = SoilMetrics(**make_metrics_row(
        "m-1", "p-1", "2024-05-02T00:00:00+00:00",
        moisture_level=25, vegetation_index=0.7,
        nitrogen_level=20, phosphorus_level=45, potassium_level=75,
    ))

    assert classify_metrics(metrics) == {
        "moisture": "Low",
        "vegetation": "Healthy",
        "nitrogen": "Deficient",
        "phosphorus": "Adequate",
        "potassium": "Optimal",
    }
