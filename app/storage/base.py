"""
Storage interface shared by the in-memory and relational backends.

The HTTP layer only ever talks to a ``BaseStorage``. Public methods validate
input, apply defaults and assign ids here; backends implement a handful of
primitive operations over "kinds" (one per entity) and must behave
identically from the caller's point of view.
"""

import abc
import asyncio
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Type, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ValidationError
from app.storage import records as r
from app.storage.records import utcnow

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Kind:
    """Static description of one entity collection."""

    name: str
    label: str
    record: Type[BaseModel]
    create: Optional[Type[BaseModel]] = None
    update: Optional[Type[BaseModel]] = None
    unique: Tuple[str, ...] = ()
    # Filled with the current time on insert when left empty
    timestamp_field: Optional[str] = None
    # (kind name, referencing field, "delete" | "nullify")
    on_delete: Tuple[Tuple[str, str, str], ...] = ()

USERS = Kind(
    "users", "user", r.User, r.UserCreate, r.UserUpdate,
    unique=("email",), timestamp_field="created_at",
    on_delete=(("sessions", "user_id", "delete"),),
)
DRIVERS = Kind(
    "drivers", "driver", r.Driver, r.DriverCreate, r.DriverUpdate,
    unique=("taxi_id",),
    on_delete=(("taxis", "driver_id", "nullify"),),
)
TAXIS = Kind(
    "taxis", "taxi", r.Taxi, r.TaxiCreate, r.TaxiUpdate,
    unique=("license_plate", "driver_id"),
    on_delete=(("taxi_stats", "taxi_id", "delete"),),
)
TAXI_STATS = Kind(
    "taxi_stats", "statistics", r.TaxiStats, r.TaxiStatsCreate, r.TaxiStatsUpdate,
    unique=("taxi_id",), timestamp_field="date",
)
RECORDINGS = Kind(
    "recordings", "recording", r.Recording, r.RecordingCreate, r.RecordingUpdate,
    timestamp_field="recorded_at",
)
AVAILABLE_DRIVERS = Kind(
    "available_drivers", "available driver", r.AvailableDriver,
    r.AvailableDriverCreate, r.AvailableDriverUpdate,
    timestamp_field="registered_at",
)
SESSIONS = Kind("sessions", "session", r.Session)

KINDS = {kind.name: kind for kind in (USERS, DRIVERS, TAXIS, TAXI_STATS, RECORDINGS, AVAILABLE_DRIVERS, SESSIONS)}

Payload = Union[BaseModel, Mapping[str, Any]]

def new_id() -> str:
    return uuid.uuid4().hex

def validate_payload(model: Type[BaseModel], data: Payload, label: str) -> BaseModel:
    """Validate ``data`` against ``model`` or raise a 400-class ValidationError."""
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e, f"Invalid {label} data")

class BaseStorage(abc.ABC):
    """CRUD contract over users, drivers, taxis, statistics, recordings and
    the recruiting pool, plus server-side login sessions."""

    backend_name = "base"

    def __init__(self, seed_demo_data: bool = True):
        self.seed_demo_data = seed_demo_data
        self._initialized = False
        self._init_lock = asyncio.Lock()

    # Lifecycle

    async def initialize(self) -> None:
        """Prepare the backend and seed demo data exactly once."""
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            await self._prepare()
            if self.seed_demo_data and await self._is_empty():
                from app.storage.seed import demo_records

                logger.info(f"Seeding demo data into {self.backend_name} storage")
                await self._seed(demo_records())
            self._initialized = True

    async def close(self) -> None:
        pass

    # Backend primitives

    async def _prepare(self) -> None:
        pass

    @abc.abstractmethod
    async def _is_empty(self) -> bool:
        ...

    @abc.abstractmethod
    async def _seed(self, items: Sequence[Tuple[Kind, BaseModel]]) -> None:
        """Insert all ``items`` as one unit."""

    @abc.abstractmethod
    async def _get(self, kind: Kind, record_id: str) -> Optional[BaseModel]:
        ...

    @abc.abstractmethod
    async def _find(self, kind: Kind, field: str, value: Any) -> List[BaseModel]:
        ...

    @abc.abstractmethod
    async def _list(self, kind: Kind) -> List[BaseModel]:
        ...

    @abc.abstractmethod
    async def _insert(self, kind: Kind, record: BaseModel) -> BaseModel:
        """Store a new record; raise ValidationError on a unique conflict."""

    @abc.abstractmethod
    async def _patch(self, kind: Kind, record_id: str, changes: dict) -> Optional[BaseModel]:
        """Merge ``changes``; None if absent, ValidationError on a unique conflict."""

    @abc.abstractmethod
    async def _delete(self, kind: Kind, record_id: str) -> bool:
        """Remove a record and apply ``kind.on_delete`` in the same unit."""

    @abc.abstractmethod
    async def _purge_sessions(self, now) -> int:
        ...

    # Generic operations

    async def _create(self, kind: Kind, data: Payload) -> BaseModel:
        await self.initialize()
        payload = validate_payload(kind.create, data, kind.label)
        fields = payload.model_dump()
        if kind.timestamp_field and fields.get(kind.timestamp_field) is None:
            fields[kind.timestamp_field] = utcnow()
        record = await self._insert(kind, kind.record(id=new_id(), **fields))
        logger.info(f"Created {kind.label} {record.id}")
        return record

    async def _update(self, kind: Kind, record_id: str, patch: Payload) -> Optional[BaseModel]:
        await self.initialize()
        changes = validate_payload(kind.update, patch, kind.label).changes()
        if not changes:
            return await self._get(kind, record_id)
        return await self._patch(kind, record_id, changes)

    async def _fetch(self, kind: Kind, record_id: str) -> Optional[BaseModel]:
        await self.initialize()
        return await self._get(kind, record_id)

    async def _fetch_all(self, kind: Kind) -> List[BaseModel]:
        await self.initialize()
        return await self._list(kind)

    async def _fetch_by(self, kind: Kind, field: str, value: Any) -> List[BaseModel]:
        await self.initialize()
        return await self._find(kind, field, value)

    async def _remove(self, kind: Kind, record_id: str) -> bool:
        await self.initialize()
        deleted = await self._delete(kind, record_id)
        if deleted:
            logger.info(f"Deleted {kind.label} {record_id}")
        return deleted

    # Users

    async def get_user(self, user_id: str) -> Optional[r.User]:
        return await self._fetch(USERS, user_id)

    async def get_user_by_email(self, email: str) -> Optional[r.User]:
        users = await self._fetch_by(USERS, "email", email.lower())
        return users[0] if users else None

    async def list_users(self) -> List[r.User]:
        return await self._fetch_all(USERS)

    async def create_user(self, data: Payload) -> r.User:
        return await self._create(USERS, data)

    async def update_user(self, user_id: str, patch: Payload) -> Optional[r.User]:
        return await self._update(USERS, user_id, patch)

    async def delete_user(self, user_id: str) -> bool:
        return await self._remove(USERS, user_id)

    # Drivers

    async def get_driver(self, driver_id: str) -> Optional[r.Driver]:
        return await self._fetch(DRIVERS, driver_id)

    async def get_driver_by_taxi_id(self, taxi_id: str) -> Optional[r.Driver]:
        drivers = await self._fetch_by(DRIVERS, "taxi_id", taxi_id)
        return drivers[0] if drivers else None

    async def list_drivers(self) -> List[r.Driver]:
        return await self._fetch_all(DRIVERS)

    async def create_driver(self, data: Payload) -> r.Driver:
        return await self._create(DRIVERS, data)

    async def update_driver(self, driver_id: str, patch: Payload) -> Optional[r.Driver]:
        return await self._update(DRIVERS, driver_id, patch)

    async def delete_driver(self, driver_id: str) -> bool:
        return await self._remove(DRIVERS, driver_id)

    # Taxis

    async def get_taxi(self, taxi_id: str) -> Optional[r.Taxi]:
        return await self._fetch(TAXIS, taxi_id)

    async def get_taxi_with_driver(self, taxi_id: str) -> Optional[r.TaxiWithDriver]:
        """Taxi plus its resolved driver; a dangling driver id yields no driver."""
        taxi = await self._fetch(TAXIS, taxi_id)
        if taxi is None:
            return None
        driver = await self._get(DRIVERS, taxi.driver_id) if taxi.driver_id else None
        return r.TaxiWithDriver(**taxi.model_dump(), driver=driver)

    async def list_taxis(self) -> List[r.Taxi]:
        return await self._fetch_all(TAXIS)

    async def create_taxi(self, data: Payload) -> r.Taxi:
        return await self._create(TAXIS, data)

    async def update_taxi(self, taxi_id: str, patch: Payload) -> Optional[r.Taxi]:
        return await self._update(TAXIS, taxi_id, patch)

    async def delete_taxi(self, taxi_id: str) -> bool:
        return await self._remove(TAXIS, taxi_id)

    # Taxi statistics

    async def get_taxi_stats(self, stats_id: str) -> Optional[r.TaxiStats]:
        return await self._fetch(TAXI_STATS, stats_id)

    async def get_stats_by_taxi_id(self, taxi_id: str) -> Optional[r.TaxiStats]:
        stats = await self._fetch_by(TAXI_STATS, "taxi_id", taxi_id)
        return stats[0] if stats else None

    async def list_taxi_stats(self) -> List[r.TaxiStats]:
        return await self._fetch_all(TAXI_STATS)

    async def create_taxi_stats(self, data: Payload) -> r.TaxiStats:
        return await self._create(TAXI_STATS, data)

    async def update_taxi_stats(self, stats_id: str, patch: Payload) -> Optional[r.TaxiStats]:
        return await self._update(TAXI_STATS, stats_id, patch)

    async def update_stats_by_taxi_id(self, taxi_id: str, patch: Payload) -> Optional[r.TaxiStats]:
        stats = await self.get_stats_by_taxi_id(taxi_id)
        if stats is None:
            return None
        return await self._update(TAXI_STATS, stats.id, patch)

    async def delete_taxi_stats(self, stats_id: str) -> bool:
        return await self._remove(TAXI_STATS, stats_id)

    # Recordings

    async def get_recording(self, recording_id: str) -> Optional[r.Recording]:
        return await self._fetch(RECORDINGS, recording_id)

    async def list_recordings(self) -> List[r.Recording]:
        return await self._fetch_all(RECORDINGS)

    async def list_recordings_by_taxi_id(self, taxi_id: str) -> List[r.Recording]:
        return await self._fetch_by(RECORDINGS, "taxi_id", taxi_id)

    async def create_recording(self, data: Payload) -> r.Recording:
        return await self._create(RECORDINGS, data)

    async def update_recording(self, recording_id: str, patch: Payload) -> Optional[r.Recording]:
        return await self._update(RECORDINGS, recording_id, patch)

    async def delete_recording(self, recording_id: str) -> bool:
        return await self._remove(RECORDINGS, recording_id)

    # Recruiting pool

    async def get_available_driver(self, entry_id: str) -> Optional[r.AvailableDriver]:
        return await self._fetch(AVAILABLE_DRIVERS, entry_id)

    async def list_available_drivers(self) -> List[r.AvailableDriver]:
        return await self._fetch_all(AVAILABLE_DRIVERS)

    async def create_available_driver(self, data: Payload) -> r.AvailableDriver:
        return await self._create(AVAILABLE_DRIVERS, data)

    async def update_available_driver(self, entry_id: str, patch: Payload) -> Optional[r.AvailableDriver]:
        return await self._update(AVAILABLE_DRIVERS, entry_id, patch)

    async def delete_available_driver(self, entry_id: str) -> bool:
        return await self._remove(AVAILABLE_DRIVERS, entry_id)

    # Sessions

    async def create_session(self, user_id: str, ttl: timedelta) -> r.Session:
        await self.initialize()
        session = r.Session.expiring_in(secrets.token_urlsafe(32), user_id, ttl)
        return await self._insert(SESSIONS, session)

    async def get_session(self, session_id: str) -> Optional[r.Session]:
        """Live session by id; expired sessions are dropped and reported absent."""
        await self.initialize()
        session = await self._get(SESSIONS, session_id)
        if session is None:
            return None
        if session.is_expired():
            await self._delete(SESSIONS, session_id)
            return None
        return session

    async def delete_session(self, session_id: str) -> bool:
        await self.initialize()
        return await self._delete(SESSIONS, session_id)

    async def purge_expired_sessions(self) -> int:
        await self.initialize()
        return await self._purge_sessions(utcnow())
