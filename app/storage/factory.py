"""
Backend selection from settings.
"""

import logging

from app.core.config import Settings
from app.storage.base import BaseStorage
from app.storage.memory import MemoryStorage
from app.storage.sql import SqlStorage

logger = logging.getLogger(__name__)

def build_storage(settings: Settings) -> BaseStorage:
    """In-memory storage unless a database URL is configured."""
    if settings.use_memory_storage():
        logger.info("Using in-memory storage")
        return MemoryStorage(seed_demo_data=settings.SEED_DEMO_DATA)

    logger.info("Using relational storage")
    return SqlStorage(
        settings.async_database_url,
        seed_demo_data=settings.SEED_DEMO_DATA,
        echo=settings.DATABASE_ECHO,
    )
