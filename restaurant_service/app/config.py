import os

from .logger import logger
from .memdb import MemoryStorage
from .sqldb import SqlStorage
from .storage import Storage

# Which order store backs the service: "memory" or "sql".
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory").strip().lower()

# SQLAlchemy connection string, only used by the "sql" backend.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./restaurant.db")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
DB_POOL_TIMEOUT = float(os.getenv("DB_POOL_TIMEOUT", "30"))

# Seconds to wait for the in-memory store lock before giving up.
LOCK_TIMEOUT = float(os.getenv("LOCK_TIMEOUT", "5"))

# Tables 1..SEED_TABLES exist from startup.
SEED_TABLES = int(os.getenv("SEED_TABLES", "100"))

BACKENDS = ("memory", "sql")


def build_storage(backend: str = None, database_url: str = None, seed_tables: int = None) -> Storage:
    backend = (backend or STORAGE_BACKEND).strip().lower()
    seed_tables = SEED_TABLES if seed_tables is None else seed_tables

    if backend == "memory":
        storage = MemoryStorage(lock_timeout=LOCK_TIMEOUT)
    elif backend == "sql":
        storage = SqlStorage.from_url(
            database_url or DATABASE_URL,
            pool_size=DB_POOL_SIZE,
            pool_timeout=DB_POOL_TIMEOUT,
        )
        storage.setup()
    else:
        raise ValueError(f"Unknown storage backend {backend!r}, expected one of {BACKENDS}")

    storage.seed_tables(seed_tables)
    logger.info(f"build_storage ::: {backend} backend ready with {seed_tables} seeded tables")
    return storage
