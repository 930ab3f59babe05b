"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends, Request

from app.services.application.monitoring_data_store import MonitoringDataStore


def get_data_store(request: Request) -> MonitoringDataStore:
    """
    Dependency factory for MonitoringDataStore.

    The store is created once in the application lifespan and kept on
    ``app.state`` so its mock-mode flag lives as long as the app.

    Args:
        request: The incoming request

    Returns:
        MonitoringDataStore instance
    """
    return request.app.state.data_store


# Type aliases for cleaner route signatures
DataStoreDep = Annotated[MonitoringDataStore, Depends(get_data_store)]
