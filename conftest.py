import os

# Tests run against the in-memory store unless a test builds its own.
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SEED_TABLES", "10")
os.environ.setdefault("LOG_LEVEL", "WARNING")
