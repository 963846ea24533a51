"""Repository adapters - Database and in-memory implementations."""

from .memory import InMemoryRecordStore, InMemoryUserDirectory
from .postgres import PostgresRecordStore, PostgresUserDirectory, run_migrations

__all__ = [
    "InMemoryRecordStore",
    "InMemoryUserDirectory",
    "PostgresRecordStore",
    "PostgresUserDirectory",
    "run_migrations",
]
