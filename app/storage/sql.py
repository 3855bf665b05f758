"""
Relational storage on SQLAlchemy's async ORM (PostgreSQL in production,
SQLite in tests).
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple, Type

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from app.core.database import Base, create_engine_for_url, create_session_factory
from app.core.errors import InternalError, ValidationError
from app.models.driver import AvailableDriverRow, DriverRow
from app.models.recording import RecordingRow
from app.models.taxi import TaxiRow, TaxiStatsRow
from app.models.user import SessionRow, UserRow
from app.storage.base import BaseStorage, Kind

logger = logging.getLogger(__name__)

ROWS: Dict[str, Type[Base]] = {
    "users": UserRow,
    "sessions": SessionRow,
    "drivers": DriverRow,
    "taxis": TaxiRow,
    "taxi_stats": TaxiStatsRow,
    "recordings": RecordingRow,
    "available_drivers": AvailableDriverRow,
}

class SqlStorage(BaseStorage):
    """
    SQLAlchemy-backed implementation. Accepts any async SQLAlchemy URL.

    Each primitive runs in its own transaction; demo seeding and cascading
    deletes run inside a single one.
    """

    backend_name = "sql"

    def __init__(
        self,
        database_url: Optional[str] = None,
        *,
        engine: Optional[AsyncEngine] = None,
        seed_demo_data: bool = True,
        echo: bool = False,
    ):
        super().__init__(seed_demo_data=seed_demo_data)
        if engine is None:
            if not database_url:
                raise ValueError("DATABASE_URL is required for SqlStorage")
            engine = create_engine_for_url(database_url, echo=echo)
        self.engine = engine
        self.Session = create_session_factory(engine)

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self.Session() as session:
                async with session.begin():
                    yield session
        except IntegrityError as e:
            logger.warning(f"Integrity error: {e.orig}")
            raise ValidationError("Duplicate value violates a unique constraint") from e
        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}")
            raise InternalError("Storage backend failure") from e

    async def _check_unique(
        self, session: AsyncSession, kind: Kind, values: dict, exclude_id: Optional[str] = None
    ) -> None:
        row_cls = ROWS[kind.name]
        for field in kind.unique:
            if values.get(field) is None:
                continue
            query = select(row_cls.id).where(getattr(row_cls, field) == values[field])
            if exclude_id:
                query = query.where(row_cls.id != exclude_id)
            result = await session.execute(query.limit(1))
            if result.scalar_one_or_none() is not None:
                raise ValidationError.for_field(
                    to_camel(field), f"A {kind.label} with this {to_camel(field)} already exists"
                )

    async def _prepare(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create tables: {e}")
            raise InternalError("Storage backend failure") from e

    async def _is_empty(self) -> bool:
        async with self._transaction() as session:
            result = await session.execute(select(func.count()).select_from(UserRow))
            return result.scalar_one() == 0

    async def _seed(self, items: Sequence[Tuple[Kind, BaseModel]]) -> None:
        try:
            async with self._transaction() as session:
                session.add_all([ROWS[kind.name](**record.model_dump()) for kind, record in items])
        except ValidationError:
            # Another process seeded between our emptiness check and insert
            logger.info("Demo data already present, skipping seed")

    async def _get(self, kind: Kind, record_id: str) -> Optional[BaseModel]:
        async with self._transaction() as session:
            row = await session.get(ROWS[kind.name], record_id)
            return kind.record.model_validate(row) if row else None

    async def _find(self, kind: Kind, field: str, value: Any) -> List[BaseModel]:
        row_cls = ROWS[kind.name]
        async with self._transaction() as session:
            result = await session.execute(select(row_cls).where(getattr(row_cls, field) == value))
            return [kind.record.model_validate(row) for row in result.scalars().all()]

    async def _list(self, kind: Kind) -> List[BaseModel]:
        async with self._transaction() as session:
            result = await session.execute(select(ROWS[kind.name]))
            return [kind.record.model_validate(row) for row in result.scalars().all()]

    async def _insert(self, kind: Kind, record: BaseModel) -> BaseModel:
        values = record.model_dump()
        async with self._transaction() as session:
            await self._check_unique(session, kind, values)
            row = ROWS[kind.name](**values)
            session.add(row)
            await session.flush()
            return kind.record.model_validate(row)

    async def _patch(self, kind: Kind, record_id: str, changes: dict) -> Optional[BaseModel]:
        async with self._transaction() as session:
            row = await session.get(ROWS[kind.name], record_id)
            if row is None:
                return None
            await self._check_unique(session, kind, changes, exclude_id=record_id)
            for field, value in changes.items():
                setattr(row, field, value)
            await session.flush()
            return kind.record.model_validate(row)

    async def _delete(self, kind: Kind, record_id: str) -> bool:
        async with self._transaction() as session:
            row = await session.get(ROWS[kind.name], record_id)
            if row is None:
                return False
            for target, field, action in kind.on_delete:
                target_cls = ROWS[target]
                column = getattr(target_cls, field)
                if action == "delete":
                    await session.execute(delete(target_cls).where(column == record_id))
                else:
                    await session.execute(
                        update(target_cls).where(column == record_id).values({field: None})
                    )
            await session.delete(row)
            return True

    async def _purge_sessions(self, now) -> int:
        async with self._transaction() as session:
            result = await session.execute(delete(SessionRow).where(SessionRow.expires_at <= now))
            purged = result.rowcount or 0
        if purged:
            logger.info(f"Purged {purged} expired sessions")
        return purged
