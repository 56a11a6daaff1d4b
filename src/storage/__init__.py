"""Storage layer: connection pool and schema for the newsletter store."""

from src.storage.database import Database, close_database, get_database
from src.storage.schema import init_schema

__all__ = ["Database", "close_database", "get_database", "init_schema"]
