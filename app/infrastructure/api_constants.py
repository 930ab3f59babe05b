"""
Store endpoint constants and configuration.

This module contains all backing-store endpoint paths and related constants.
Centralizing these values makes it easy to swap out endpoints or update API versions.
"""


# Backing store (PostgREST-style) endpoints
class StoreEndpoints:
    """Store endpoint paths."""

    # Base paths
    REST_BASE = "/rest/v1"
    AUTH_BASE = "/auth/v1"

    # Tables
    MONITORING_POINTS_TABLE = "monitoring_points"
    SOIL_METRICS_TABLE = "soil_metrics"

    # Auth endpoints
    CURRENT_USER = f"{AUTH_BASE}/user"

    @classmethod
    def table(cls, name: str) -> str:
        """
        Get the REST endpoint for a table.

        Args:
            name: Table name

        Returns:
            Endpoint path for the table
        """
        return f"{cls.REST_BASE}/{name}"

    @classmethod
    def monitoring_points(cls) -> str:
        return cls.table(cls.MONITORING_POINTS_TABLE)

    @classmethod
    def soil_metrics(cls) -> str:
        return cls.table(cls.SOIL_METRICS_TABLE)


# Store Configuration Constants
class APIConstants:
    """General store configuration constants."""

    # HTTP Headers
    CONTENT_TYPE_JSON = "application/json"
    PREFER_RETURN_REPRESENTATION = "return=representation"

    # Query limits
    DEFAULT_METRICS_LIMIT = 50
    MAX_METRICS_LIMIT = 500
    PROBE_LIMIT = 1
