#!/usr/bin/env python3
"""
Lorekeeper Database Package
---------------------------
SQLite persistence for worlds, timelines and timeline events.

- manager: LorekeeperDB (engine, session scope, schema, managers)
- models: SQLAlchemy ORM models
- managers: per-entity CRUD managers
- event_store: SQL implementation of the chronology EventStore
- decorators: error translation and operation logging
"""

from .manager import LorekeeperDB
from .event_store import SqlEventStore
from .decorators import (
    DatabaseOperation,
    handle_db_errors,
    log_database_operation,
)

__all__ = [
    "LorekeeperDB",
    "SqlEventStore",
    "DatabaseOperation",
    "handle_db_errors",
    "log_database_operation",
]
