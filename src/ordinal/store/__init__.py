"""Storage layer for the ordering engine."""

from ordinal.store.database import Database
from ordinal.store.indexes import create_additional_indexes, drop_additional_indexes

__all__ = [
    "Database",
    "create_additional_indexes",
    "drop_additional_indexes",
]
