"""
Pydantic schemas for API request/response payloads that are not stored
records themselves.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional

from app.storage.records import CamelModel

# Auth schemas
class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=1, description="Account password")

class SignupRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=1, description="Account password")
    name: str = Field(..., min_length=1, description="Display name")

class PublicUser(BaseModel):
    """User without credentials."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str

class UserEnvelope(BaseModel):
    user: PublicUser

# Taxi location update
class LocationUpdate(CamelModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    location: Optional[str] = Field(None, description="Human readable location")

# Generic responses
class MessageResponse(BaseModel):
    message: str

class HealthResponse(BaseModel):
    status: str
    service: str
    storage: str
