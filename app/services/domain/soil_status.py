"""
Domain service: Qualitative status bands for soil readings.
"""
from typing import Dict, Tuple

from app.domain.models import SoilMetrics


# (low threshold, high threshold, labels for below-low / below-high / above)
MOISTURE_BANDS: Tuple[float, float, Tuple[str, str, str]] = (
    30.0, 60.0, ("Low", "Moderate", "Optimal")
)
VEGETATION_BANDS: Tuple[float, float, Tuple[str, str, str]] = (
    0.3, 0.6, ("Poor", "Moderate", "Healthy")
)
NUTRIENT_BANDS: Tuple[float, float, Tuple[str, str, str]] = (
    30.0, 60.0, ("Deficient", "Adequate", "Optimal")
)


def _band(value: float, bands: Tuple[float, float, Tuple[str, str, str]]) -> str:
    low, high, (below_low, below_high, above) = bands
    if value < low:
        return below_low
    if value < high:
        return below_high
    return above


def moisture_status(value: float) -> str:
    """Classify a moisture percentage as Low, Moderate or Optimal."""
    return _band(value, MOISTURE_BANDS)


def vegetation_status(value: float) -> str:
    """Classify a vegetation index as Poor, Moderate or Healthy."""
    return _band(value, VEGETATION_BANDS)


def nutrient_status(value: float) -> str:
    """Classify a nutrient level as Deficient, Adequate or Optimal."""
    return _band(value, NUTRIENT_BANDS)


def classify_metrics(metrics: SoilMetrics) -> Dict[str, str]:
    """
    Summarize a reading as status labels.

    Args:
        metrics: Soil reading to classify

    Returns:
        Mapping of reading name to status label
    """
    return {
        "moisture": moisture_status(metrics.moisture_level),
        "vegetation": vegetation_status(metrics.vegetation_index),
        "nitrogen": nutrient_status(metrics.nitrogen_level),
        "phosphorus": nutrient_status(metrics.phosphorus_level),
        "potassium": nutrient_status(metrics.potassium_level),
    }
