"""
Driver management API endpoints.
"""

from fastapi import APIRouter, Depends, status
from typing import List
import logging

from app.api.deps import get_storage
from app.api.v1.schemas import MessageResponse
from app.core.errors import NotFoundError
from app.storage.base import BaseStorage
from app.storage.records import Driver, DriverCreate, DriverUpdate

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=List[Driver])
async def list_drivers(storage: BaseStorage = Depends(get_storage)):
    """List all drivers."""
    return await storage.list_drivers()

@router.post("", response_model=Driver, status_code=status.HTTP_201_CREATED)
async def create_driver(
    driver_data: DriverCreate,
    storage: BaseStorage = Depends(get_storage)
):
    """Add a driver to a taxi."""
    return await storage.create_driver(driver_data)

@router.get("/taxi/{taxi_id}", response_model=Driver)
async def get_driver_by_taxi(
    taxi_id: str,
    storage: BaseStorage = Depends(get_storage)
):
    """Get the driver assigned to a taxi."""

    driver = await storage.get_driver_by_taxi_id(taxi_id)
    if not driver:
        raise NotFoundError("Driver not found for this taxi")

    return driver

@router.get("/{driver_id}", response_model=Driver)
async def get_driver(
    driver_id: str,
    storage: BaseStorage = Depends(get_storage)
):
    """Get driver details by ID."""

    driver = await storage.get_driver(driver_id)
    if not driver:
        raise NotFoundError("Driver not found")

    return driver

@router.patch("/{driver_id}", response_model=Driver)
async def update_driver(
    driver_id: str,
    driver_update: DriverUpdate,
    storage: BaseStorage = Depends(get_storage)
):
    """Update driver information."""

    driver = await storage.update_driver(driver_id, driver_update)
    if not driver:
        raise NotFoundError("Driver not found")

    logger.info(f"Driver updated: {driver_id}")

    return driver

@router.delete("/{driver_id}", response_model=MessageResponse)
async def delete_driver(
    driver_id: str,
    storage: BaseStorage = Depends(get_storage)
):
    """Remove a driver; taxis that pointed at them are left without one."""

    if not await storage.delete_driver(driver_id):
        raise NotFoundError("Driver not found")

    return MessageResponse(message="Driver deleted successfully")
