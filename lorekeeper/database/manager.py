#!/usr/bin/env python3
"""
manager.py
--------------------
Provides the LorekeeperDB class for interacting with the SQLite database.

LorekeeperDB owns the engine and session factory, creates or migrates the
schema, and hands out entity managers bound to a session:

    db = LorekeeperDB(DB_PATH, ALEMBIC_DIR, log_dir=LOG_DIR)

    with db.session_scope():
        world = db.worlds.create({"name": "Arda", "eras": ["First Age", "Second Age"]})
        main = db.timelines.create({"world": world, "name": "Main"})

    event, report = db.save_event({
        "world": "Arda",
        "title": "Fall of Gondolin",
        "date": {"type": "exact", "era": "First Age", "year": 510},
        "timelines": [main.id],
    })

SQLite notes:
    - Foreign keys are enforced (PRAGMA foreign_keys=ON on every connection).
    - pysqlite's implicit transaction handling is disabled and BEGIN is
      emitted explicitly so SAVEPOINTs behave; SqlEventStore relies on
      them to isolate one timeline's writes from the next.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple, Union

# --- Third party imports ---
from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Engine, create_engine, event, inspect
from sqlalchemy.orm import Session, sessionmaker

# --- Local imports ---
from lorekeeper.chronology.insertion import InsertionReport, TimelineLocks
from lorekeeper.core.config import EraConfig
from lorekeeper.core.exceptions import DatabaseError
from lorekeeper.core.logging_manager import LorekeeperLogger, safe_logger

from .decorators import handle_db_errors, log_database_operation
from .managers import EventManager, MembershipManager, TimelineManager, WorldManager
from .models import Base, TimelineEvent


def _configure_sqlite(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(connection):
        connection.exec_driver_sql("BEGIN")


class LorekeeperDB:
    """
    Main database manager for the Lorekeeper wiki database.

    Attributes:
        db_path: SQLite database file
        alembic_dir: Alembic script directory
        logger: LorekeeperLogger, or None when no log_dir was given
        era_config: Fallback era lists for worlds without era_order
        locks: Per-timeline locks shared by every session of this instance
        engine: SQLAlchemy engine
        SessionLocal: Session factory
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        alembic_dir: Union[str, Path],
        log_dir: Optional[Union[str, Path]] = None,
        era_config: Optional[EraConfig] = None,
        serialize_timelines: bool = True,
    ) -> None:
        """
        Initialize database engine and session factory.

        Args:
            db_path: Path to the SQLite file
            alembic_dir: Path to the Alembic directory
            log_dir: Directory for log files (optional)
            era_config: Era lists from the eras file (optional)
            serialize_timelines: Serialize placement per timeline within
                this process
        """
        self.db_path = Path(db_path).expanduser().resolve()
        self.alembic_dir = Path(alembic_dir).expanduser().resolve()

        if log_dir:
            self.log_dir = Path(log_dir).expanduser().resolve() / "system"
            self.logger: Optional[LorekeeperLogger] = LorekeeperLogger(
                self.log_dir, component_name="database"
            )
        else:
            self.logger = None

        self.era_config = era_config or EraConfig()
        self.locks = TimelineLocks() if serialize_timelines else None

        self._world_manager: Optional[WorldManager] = None
        self._timeline_manager: Optional[TimelineManager] = None
        self._event_manager: Optional[EventManager] = None

        self._setup_engine()

    def _setup_engine(self) -> None:
        """Initialize database engine and session factory."""
        try:
            safe_logger(self.logger).log_operation(
                "database_init_start",
                {"db_path": str(self.db_path), "alembic_dir": str(self.alembic_dir)},
            )

            is_new = not self.db_path.exists()
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                pool_pre_ping=True,
            )
            _configure_sqlite(self.engine)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )

            self.alembic_cfg: Config = self._setup_alembic()

            if is_new:
                self.initialize_schema()

            safe_logger(self.logger).log_operation(
                "database_init_complete", {"success": True}
            )

        except Exception as e:
            safe_logger(self.logger).log_error(e, {"operation": "database_init"})
            raise DatabaseError(f"Database initialization failed: {e}") from e

    # ---- Session Management ----
    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Transactional scope that also wires the entity managers.

        Commits on success, rolls back on any exception. Managers are only
        available inside the scope (db.worlds, db.timelines, db.events,
        db.memberships).
        """
        session = self.SessionLocal()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")

        self._world_manager = WorldManager(session, self.logger)
        self._timeline_manager = TimelineManager(session, self.logger)
        self._event_manager = EventManager(
            session, self.logger, era_config=self.era_config, locks=self.locks
        )

        safe_logger(self.logger).log_debug("session_start", {"session_id": session_id})

        try:
            yield session
            session.commit()
            safe_logger(self.logger).log_debug(
                "session_commit", {"session_id": session_id}
            )
        except Exception as e:
            session.rollback()
            safe_logger(self.logger).log_error(
                e, {"operation": "session_rollback", "session_id": session_id}
            )
            raise
        finally:
            self._world_manager = None
            self._timeline_manager = None
            self._event_manager = None
            session.close()
            safe_logger(self.logger).log_debug(
                "session_close", {"session_id": session_id}
            )

    def get_session(self) -> Session:
        """Create and return a new SQLAlchemy session."""
        return self.SessionLocal()

    # -------------------------------------------------------------------------
    # Manager Properties
    # -------------------------------------------------------------------------

    @property
    def worlds(self) -> WorldManager:
        """
        Access WorldManager.

        Raises:
            DatabaseError: If accessed outside of session_scope
        """
        if self._world_manager is None:
            raise DatabaseError(
                "WorldManager requires active session. Use within session_scope."
            )
        return self._world_manager

    @property
    def timelines(self) -> TimelineManager:
        if self._timeline_manager is None:
            raise DatabaseError(
                "TimelineManager requires active session. Use within session_scope."
            )
        return self._timeline_manager

    @property
    def events(self) -> EventManager:
        if self._event_manager is None:
            raise DatabaseError(
                "EventManager requires active session. Use within session_scope."
            )
        return self._event_manager

    @property
    def memberships(self) -> MembershipManager:
        return self.events.memberships

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def save_event(
        self, metadata: Dict[str, Any]
    ) -> Tuple[TimelineEvent, InsertionReport]:
        """
        Create or update an event and place it on timelines in one transaction.

        Per-timeline failures are reported, not raised; the event and the
        successful placements are committed.

        Returns:
            (event, InsertionReport)

        Raises:
            ValidationError: Invalid metadata or date (nothing is written)
            StoreUnavailableError: Database lost; the transaction is rolled back
        """
        with self.session_scope():
            event, report = self.events.save(metadata)
        return event, report

    # ---- Alembic setup ----
    def _setup_alembic(self) -> Config:
        """Alembic configuration built in code; no alembic.ini is needed."""
        try:
            alembic_cfg = Config()
            alembic_cfg.set_main_option("script_location", str(self.alembic_dir))
            alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{self.db_path}")
            alembic_cfg.set_main_option(
                "file_template",
                "%%(year)d%%(month).2d%%(day).2d_%%(hour).2d%%(minute).2d_%%(slug)s",
            )
            return alembic_cfg
        except Exception as e:
            safe_logger(self.logger).log_error(e, {"operation": "setup_alembic"})
            raise DatabaseError(f"Alembic configuration failed: {e}") from e

    @handle_db_errors
    @log_database_operation("initialize_schema")
    def initialize_schema(self) -> None:
        """
        Create tables on a fresh database, otherwise run pending migrations.

        A fresh database is created from the ORM metadata and stamped with
        the head revision.
        """
        try:
            table_names = inspect(self.engine).get_table_names()

            if not table_names:
                Base.metadata.create_all(bind=self.engine)
                try:
                    command.stamp(self.alembic_cfg, "head")
                    safe_logger(self.logger).log_operation(
                        "fresh_database_created",
                        {"tables_created": len(Base.metadata.tables)},
                    )
                except Exception as e:
                    safe_logger(self.logger).log_error(e, {"operation": "stamp_database"})
            else:
                self.upgrade_database()
                safe_logger(self.logger).log_operation(
                    "existing_database_migrated", {"table_count": len(table_names)}
                )
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(f"Could not initialize database: {e}") from e

    @handle_db_errors
    @log_database_operation("upgrade_database")
    def upgrade_database(self, revision: str = "head") -> None:
        """Upgrade the schema to an Alembic revision (default: head)."""
        try:
            command.upgrade(self.alembic_cfg, revision)
        except Exception as e:
            raise DatabaseError(f"Database upgrade failed: {e}") from e

    def get_migration_history(self) -> Dict[str, Optional[str]]:
        """
        Current Alembic revision of the database.

        Returns:
            {"current_revision": ..., "status": "up_to_date" | "needs_migration"},
            or {"error": ...}
        """
        try:
            with self.engine.connect() as conn:
                current_rev = MigrationContext.configure(conn).get_current_revision()
            return {
                "current_revision": current_rev,
                "status": "up_to_date" if current_rev else "needs_migration",
            }
        except Exception as e:
            safe_logger(self.logger).log_error(e, {"operation": "get_migration_history"})
            return {"error": str(e)}
