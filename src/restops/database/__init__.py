"""Persistence layer for restops."""

from restops.database.base import Database
from restops.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
