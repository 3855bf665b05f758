"""
In-process storage backed by plain dicts.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from app.core.errors import ValidationError
from app.storage.base import KINDS, SESSIONS, BaseStorage, Kind

logger = logging.getLogger(__name__)

class MemoryStorage(BaseStorage):
    """Ephemeral storage for development and tests.

    None of the primitives await, so each one runs to completion on the
    event loop without interleaving; that is the only serialization needed.
    Records are copied on the way in and out so callers never share state
    with the store.
    """

    backend_name = "memory"

    def __init__(self, seed_demo_data: bool = True):
        super().__init__(seed_demo_data=seed_demo_data)
        self.tables: Dict[str, Dict[str, BaseModel]] = {name: {} for name in KINDS}

    def reset(self) -> None:
        """Clear all stored data and allow seeding again (useful in tests)."""
        for table in self.tables.values():
            table.clear()
        self._initialized = False

    def _check_unique(self, kind: Kind, values: dict, exclude_id: Optional[str] = None) -> None:
        for field in kind.unique:
            if values.get(field) is None:
                continue
            for record in self.tables[kind.name].values():
                if record.id != exclude_id and getattr(record, field) == values[field]:
                    raise ValidationError.for_field(
                        to_camel(field), f"A {kind.label} with this {to_camel(field)} already exists"
                    )

    def _put(self, kind: Kind, record: BaseModel) -> BaseModel:
        self._check_unique(kind, record.model_dump(), exclude_id=record.id)
        self.tables[kind.name][record.id] = record.model_copy()
        return record.model_copy()

    async def _is_empty(self) -> bool:
        return not self.tables["users"]

    async def _seed(self, items: Sequence[Tuple[Kind, BaseModel]]) -> None:
        for kind, record in items:
            self._put(kind, record)

    async def _get(self, kind: Kind, record_id: str) -> Optional[BaseModel]:
        record = self.tables[kind.name].get(record_id)
        return record.model_copy() if record else None

    async def _find(self, kind: Kind, field: str, value: Any) -> List[BaseModel]:
        return [
            record.model_copy()
            for record in self.tables[kind.name].values()
            if getattr(record, field) == value
        ]

    async def _list(self, kind: Kind) -> List[BaseModel]:
        return [record.model_copy() for record in self.tables[kind.name].values()]

    async def _insert(self, kind: Kind, record: BaseModel) -> BaseModel:
        return self._put(kind, record)

    async def _patch(self, kind: Kind, record_id: str, changes: dict) -> Optional[BaseModel]:
        existing = self.tables[kind.name].get(record_id)
        if existing is None:
            return None
        self._check_unique(kind, changes, exclude_id=record_id)
        updated = existing.model_copy(update=changes)
        self.tables[kind.name][record_id] = updated
        return updated.model_copy()

    async def _delete(self, kind: Kind, record_id: str) -> bool:
        if self.tables[kind.name].pop(record_id, None) is None:
            return False
        for target, field, action in kind.on_delete:
            table = self.tables[target]
            for other_id, other in list(table.items()):
                if getattr(other, field) != record_id:
                    continue
                if action == "delete":
                    del table[other_id]
                else:
                    table[other_id] = other.model_copy(update={field: None})
        return True

    async def _purge_sessions(self, now) -> int:
        table = self.tables[SESSIONS.name]
        expired = [sid for sid, session in table.items() if session.is_expired(now)]
        for sid in expired:
            del table[sid]
        if expired:
            logger.info(f"Purged {len(expired)} expired sessions")
        return len(expired)
