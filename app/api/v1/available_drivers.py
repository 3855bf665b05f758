"""
Recruiting pool endpoints. Registration is public, everything else needs a
session.
"""

from fastapi import APIRouter, Depends, status
from typing import List
import logging

from app.api.deps import get_current_user, get_storage
from app.api.v1.schemas import MessageResponse
from app.core.errors import NotFoundError
from app.storage.base import BaseStorage
from app.storage.records import AvailableDriver, AvailableDriverCreate, AvailableDriverUpdate

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("", response_model=AvailableDriver, status_code=status.HTTP_201_CREATED)
async def register_available_driver(
    registration: AvailableDriverCreate,
    storage: BaseStorage = Depends(get_storage)
):
    """Public registration form."""
    return await storage.create_available_driver(registration)

@router.get("", response_model=List[AvailableDriver], dependencies=[Depends(get_current_user)])
async def list_available_drivers(storage: BaseStorage = Depends(get_storage)):
    return await storage.list_available_drivers()

@router.patch("/{entry_id}", response_model=AvailableDriver, dependencies=[Depends(get_current_user)])
async def update_available_driver(
    entry_id: str,
    entry_update: AvailableDriverUpdate,
    storage: BaseStorage = Depends(get_storage)
):
    entry = await storage.update_available_driver(entry_id, entry_update)
    if not entry:
        raise NotFoundError("Driver not found")

    return entry

@router.delete("/{entry_id}", response_model=MessageResponse, dependencies=[Depends(get_current_user)])
async def delete_available_driver(
    entry_id: str,
    storage: BaseStorage = Depends(get_storage)
):
    if not await storage.delete_available_driver(entry_id):
        raise NotFoundError("Driver not found")

    return MessageResponse(message="Driver removed successfully")
