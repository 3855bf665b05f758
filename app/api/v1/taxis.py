"""
Taxi management API endpoints.
"""

from fastapi import APIRouter, Depends, status
from typing import List
import logging

from app.api.deps import get_storage
from app.api.v1.schemas import LocationUpdate, MessageResponse
from app.core.errors import NotFoundError
from app.storage.base import BaseStorage
from app.storage.records import Taxi, TaxiCreate, TaxiUpdate, TaxiWithDriver

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=List[Taxi])
async def list_taxis(storage: BaseStorage = Depends(get_storage)):
    """List all taxis."""
    return await storage.list_taxis()

@router.post("", response_model=Taxi, status_code=status.HTTP_201_CREATED)
async def create_taxi(
    taxi_data: TaxiCreate,
    storage: BaseStorage = Depends(get_storage)
):
    """Register a new taxi."""
    return await storage.create_taxi(taxi_data)

@router.get("/{taxi_id}", response_model=TaxiWithDriver)
async def get_taxi(
    taxi_id: str,
    storage: BaseStorage = Depends(get_storage)
):
    """Get taxi by ID together with its driver."""

    taxi = await storage.get_taxi_with_driver(taxi_id)
    if not taxi:
        raise NotFoundError("Taxi not found")

    return taxi

@router.patch("/{taxi_id}", response_model=Taxi)
async def update_taxi(
    taxi_id: str,
    taxi_update: TaxiUpdate,
    storage: BaseStorage = Depends(get_storage)
):
    """Update taxi information."""

    taxi = await storage.update_taxi(taxi_id, taxi_update)
    if not taxi:
        raise NotFoundError("Taxi not found")

    logger.info(f"Taxi updated: {taxi_id}")

    return taxi

@router.patch("/{taxi_id}/location", response_model=Taxi)
async def update_taxi_location(
    taxi_id: str,
    location_update: LocationUpdate,
    storage: BaseStorage = Depends(get_storage)
):
    """Update taxi's current position."""

    changes = {
        "current_latitude": location_update.latitude,
        "current_longitude": location_update.longitude,
    }
    if "location" in location_update.model_fields_set:
        changes["current_location"] = location_update.location

    taxi = await storage.update_taxi(taxi_id, changes)
    if not taxi:
        raise NotFoundError("Taxi not found")

    logger.info(f"Taxi location updated: {taxi_id}")

    return taxi

@router.delete("/{taxi_id}", response_model=MessageResponse)
async def delete_taxi(
    taxi_id: str,
    storage: BaseStorage = Depends(get_storage)
):
    """Delete a taxi and its statistics snapshot."""

    if not await storage.delete_taxi(taxi_id):
        raise NotFoundError("Taxi not found")

    return MessageResponse(message="Taxi deleted successfully")
