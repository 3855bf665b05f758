"""
Broadcast recording metadata endpoints.
"""

from fastapi import APIRouter, Depends, status
from typing import List
import logging

from app.api.deps import get_storage
from app.api.v1.schemas import MessageResponse
from app.core.errors import NotFoundError
from app.storage.base import BaseStorage
from app.storage.records import Recording, RecordingCreate, RecordingUpdate

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=List[Recording])
async def list_recordings(storage: BaseStorage = Depends(get_storage)):
    return await storage.list_recordings()

@router.get("/taxi/{taxi_id}", response_model=List[Recording])
async def list_taxi_recordings(
    taxi_id: str,
    storage: BaseStorage = Depends(get_storage)
):
    """Recordings captured from one taxi."""
    return await storage.list_recordings_by_taxi_id(taxi_id)

@router.post("", response_model=Recording, status_code=status.HTTP_201_CREATED)
async def create_recording(
    recording_data: RecordingCreate,
    storage: BaseStorage = Depends(get_storage)
):
    """Store metadata for a finished upload."""
    return await storage.create_recording(recording_data)

@router.get("/{recording_id}", response_model=Recording)
async def get_recording(
    recording_id: str,
    storage: BaseStorage = Depends(get_storage)
):
    recording = await storage.get_recording(recording_id)
    if not recording:
        raise NotFoundError("Recording not found")

    return recording

@router.patch("/{recording_id}", response_model=Recording)
async def update_recording(
    recording_id: str,
    recording_update: RecordingUpdate,
    storage: BaseStorage = Depends(get_storage)
):
    recording = await storage.update_recording(recording_id, recording_update)
    if not recording:
        raise NotFoundError("Recording not found")

    return recording

@router.delete("/{recording_id}", response_model=MessageResponse)
async def delete_recording(
    recording_id: str,
    storage: BaseStorage = Depends(get_storage)
):
    if not await storage.delete_recording(recording_id):
        raise NotFoundError("Recording not found")

    return MessageResponse(message="Recording deleted successfully")
