"""
Pydantic records shared by every storage backend.

Each entity has three shapes: the stored record, a ``*Create`` model that is
validated in full when a record is inserted, and a ``*Update`` model whose
fields are all optional so a patch only validates what it carries. JSON
uses camelCase keys, attributes are snake_case; both are accepted on input.
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated, ClassVar, Optional, Tuple

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

# Addresses are compared case-insensitively, so they are stored lowercased
Email = Annotated[EmailStr, AfterValidator(str.lower)]

class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

class PatchModel(CamelModel):
    """Partial update: unset fields keep their stored values."""

    # Fields that may be omitted but never explicitly set to null
    non_nullable: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_null_for_required(self):
        for name in self.model_fields_set:
            if name in self.non_nullable and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)

# Users

class User(CamelModel):
    id: str
    email: str
    password: str
    name: str
    created_at: UtcDatetime

class UserCreate(CamelModel):
    email: Email
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)

class UserUpdate(PatchModel):
    non_nullable = ("email", "password", "name")

    email: Optional[Email] = None
    password: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)

# Drivers

class Driver(CamelModel):
    id: str
    name: str
    age: int
    phone: str
    rating: float
    avg_passengers_per_day: int
    photo_url: Optional[str] = None
    taxi_id: str
    is_active: bool

class DriverCreate(CamelModel):
    name: str = Field(..., min_length=1)
    age: int = Field(..., ge=18, le=100)
    phone: str = Field(..., min_length=1)
    rating: float = Field(0, ge=0, le=5)
    avg_passengers_per_day: int = Field(0, ge=0)
    photo_url: Optional[str] = None
    taxi_id: str = Field(..., min_length=1)
    is_active: bool = True

class DriverUpdate(PatchModel):
    non_nullable = ("name", "age", "phone", "rating", "avg_passengers_per_day", "taxi_id", "is_active")

    name: Optional[str] = Field(None, min_length=1)
    age: Optional[int] = Field(None, ge=18, le=100)
    phone: Optional[str] = Field(None, min_length=1)
    rating: Optional[float] = Field(None, ge=0, le=5)
    avg_passengers_per_day: Optional[int] = Field(None, ge=0)
    photo_url: Optional[str] = None
    taxi_id: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None

# Taxis

class Taxi(CamelModel):
    id: str
    name: str
    license_plate: str
    driver_id: Optional[str] = None
    current_latitude: Optional[float] = None
    current_longitude: Optional[float] = None
    current_location: Optional[str] = None
    is_online: bool

class TaxiCreate(CamelModel):
    name: str = Field(..., min_length=1)
    license_plate: str = Field(..., min_length=1)
    driver_id: Optional[str] = None
    current_latitude: Optional[float] = Field(None, ge=-90, le=90)
    current_longitude: Optional[float] = Field(None, ge=-180, le=180)
    current_location: Optional[str] = None
    is_online: bool = False

class TaxiUpdate(PatchModel):
    non_nullable = ("name", "license_plate", "is_online")

    name: Optional[str] = Field(None, min_length=1)
    license_plate: Optional[str] = Field(None, min_length=1)
    driver_id: Optional[str] = None
    current_latitude: Optional[float] = Field(None, ge=-90, le=90)
    current_longitude: Optional[float] = Field(None, ge=-180, le=180)
    current_location: Optional[str] = None
    is_online: Optional[bool] = None

class TaxiWithDriver(Taxi):
    driver: Optional[Driver] = None

# Taxi statistics

class TaxiStats(CamelModel):
    id: str
    taxi_id: str
    date: UtcDatetime
    passengers_today: int
    distance_traveled: float
    route_efficiency: float
    fuel_consumption: float
    total_earnings: float

class TaxiStatsCreate(CamelModel):
    taxi_id: str = Field(..., min_length=1)
    passengers_today: int = Field(0, ge=0)
    distance_traveled: float = Field(0, ge=0)
    route_efficiency: float = Field(0, ge=0, le=100)
    fuel_consumption: float = Field(0, ge=0)
    total_earnings: float = Field(0, ge=0)

class TaxiStatsUpdate(PatchModel):
    non_nullable = ("passengers_today", "distance_traveled", "route_efficiency", "fuel_consumption", "total_earnings")

    passengers_today: Optional[int] = Field(None, ge=0)
    distance_traveled: Optional[float] = Field(None, ge=0)
    route_efficiency: Optional[float] = Field(None, ge=0, le=100)
    fuel_consumption: Optional[float] = Field(None, ge=0)
    total_earnings: Optional[float] = Field(None, ge=0)

# Recordings

class Recording(CamelModel):
    id: str
    taxi_id: str
    filename: str
    file_url: str
    duration: float
    file_size: int
    mime_type: str
    recorded_at: UtcDatetime
    title: Optional[str] = None
    is_processed: bool

class RecordingCreate(CamelModel):
    taxi_id: str = Field(..., min_length=1)
    filename: str = Field(..., min_length=1)
    file_url: str = Field(..., min_length=1)
    duration: float = Field(0, ge=0)
    file_size: int = Field(0, ge=0)
    mime_type: str = "video/webm"
    recorded_at: Optional[UtcDatetime] = None
    title: Optional[str] = None
    is_processed: bool = False

class RecordingUpdate(PatchModel):
    non_nullable = ("taxi_id", "filename", "file_url", "duration", "file_size", "mime_type", "is_processed")

    taxi_id: Optional[str] = Field(None, min_length=1)
    filename: Optional[str] = Field(None, min_length=1)
    file_url: Optional[str] = Field(None, min_length=1)
    duration: Optional[float] = Field(None, ge=0)
    file_size: Optional[int] = Field(None, ge=0)
    mime_type: Optional[str] = None
    title: Optional[str] = None
    is_processed: Optional[bool] = None

# Recruiting pool

class AvailableDriver(CamelModel):
    id: str
    full_name: str
    age: int
    driving_experience: int
    availability: str
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    is_available: bool
    registered_at: UtcDatetime

class AvailableDriverCreate(CamelModel):
    full_name: str = Field(..., min_length=2)
    age: int = Field(..., ge=18, le=75)
    driving_experience: int = Field(..., ge=0, le=50)
    availability: str = Field(..., min_length=1)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    notes: Optional[str] = None
    is_available: bool = True

    @model_validator(mode="before")
    @classmethod
    def blank_to_none(cls, data):
        # The registration form posts empty strings for skipped fields
        if isinstance(data, dict):
            return {k: (None if k in ("phone", "email", "notes") and v == "" else v) for k, v in data.items()}
        return data

class AvailableDriverUpdate(PatchModel):
    non_nullable = ("full_name", "age", "driving_experience", "availability", "is_available")

    full_name: Optional[str] = Field(None, min_length=2)
    age: Optional[int] = Field(None, ge=18, le=75)
    driving_experience: Optional[int] = Field(None, ge=0, le=50)
    availability: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    notes: Optional[str] = None
    is_available: Optional[bool] = None

# Sessions

class Session(CamelModel):
    id: str
    user_id: str
    created_at: UtcDatetime
    expires_at: UtcDatetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    @classmethod
    def expiring_in(cls, session_id: str, user_id: str, ttl: timedelta) -> "Session":
        now = utcnow()
        return cls(id=session_id, user_id=user_id, created_at=now, expires_at=now + ttl)
