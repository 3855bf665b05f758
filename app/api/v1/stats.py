"""
Taxi statistics API endpoints.
"""

from fastapi import APIRouter, Depends, status
from typing import List
import logging

from app.api.deps import get_storage, get_telemetry
from app.core.errors import NotFoundError
from app.services.telemetry import TelemetrySource, refresh_taxi_stats
from app.storage.base import BaseStorage
from app.storage.records import TaxiStats, TaxiStatsCreate, TaxiStatsUpdate

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=List[TaxiStats])
async def list_stats(storage: BaseStorage = Depends(get_storage)):
    """Statistics snapshots for every taxi."""
    return await storage.list_taxi_stats()

@router.post("", response_model=TaxiStats, status_code=status.HTTP_201_CREATED)
async def create_stats(
    stats_data: TaxiStatsCreate,
    storage: BaseStorage = Depends(get_storage)
):
    """Start a statistics snapshot for a taxi."""
    return await storage.create_taxi_stats(stats_data)

@router.get("/taxi/{taxi_id}", response_model=TaxiStats)
async def get_taxi_stats(
    taxi_id: str,
    storage: BaseStorage = Depends(get_storage)
):
    stats = await storage.get_stats_by_taxi_id(taxi_id)
    if not stats:
        raise NotFoundError("Statistics not found for this taxi")

    return stats

@router.patch("/taxi/{taxi_id}", response_model=TaxiStats)
async def update_taxi_stats(
    taxi_id: str,
    stats_update: TaxiStatsUpdate,
    storage: BaseStorage = Depends(get_storage)
):
    """Overwrite selected fields of a taxi's snapshot."""

    stats = await storage.update_stats_by_taxi_id(taxi_id, stats_update)
    if not stats:
        raise NotFoundError("Statistics not found for this taxi")

    logger.info(f"Statistics updated for taxi {taxi_id}")

    return stats

@router.post("/taxi/{taxi_id}/refresh", response_model=TaxiStats)
async def refresh_stats(
    taxi_id: str,
    storage: BaseStorage = Depends(get_storage),
    telemetry: TelemetrySource = Depends(get_telemetry)
):
    """Pull one telemetry reading into a taxi's snapshot."""

    stats = await refresh_taxi_stats(storage, taxi_id, telemetry)
    if not stats:
        raise NotFoundError("Statistics not found for this taxi")

    return stats
