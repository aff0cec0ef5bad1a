"""Storage backends and the request-scoped storage dependency."""

import logging
from functools import lru_cache

from tutsin.core.config import Settings, settings
from tutsin.storage.base import Storage
from tutsin.storage.database import DatabaseStorage
from tutsin.storage.memory import MemStorage

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("database", "memory")


def build_storage(config: Settings) -> Storage:
    """Create the backend selected by STORAGE_BACKEND."""
    backend = config.STORAGE_BACKEND.lower()
    if backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"Unknown STORAGE_BACKEND '{config.STORAGE_BACKEND}', expected one of {STORAGE_BACKENDS}"
        )

    if config.uses_memory_storage:
        storage: Storage = MemStorage()
    else:
        from tutsin.db.session import SessionLocal

        storage = DatabaseStorage(SessionLocal)

    if config.SEED_SAMPLE_DATA:
        from tutsin.storage.seed import seed_defaults, seed_sample_data

        seed_defaults(storage)
        seed_sample_data(storage)

    logger.info("Using %s storage backend", storage.name)
    return storage


@lru_cache
def get_storage() -> Storage:
    """FastAPI dependency returning the process-wide storage instance."""
    return build_storage(settings)


__all__ = ["Storage", "MemStorage", "DatabaseStorage", "build_storage", "get_storage"]
