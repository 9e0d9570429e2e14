#!/usr/bin/env python3
"""
decorators.py
--------------------
Shared decorators and context managers for database operations.

    handle_db_errors        SQLAlchemy exceptions -> DatabaseError family
    log_database_operation  start/completion/duration logging for methods
    DatabaseOperation       both of the above for a block of code

Exception mapping:
    IntegrityError      -> DatabaseError("Data integrity violation: ...")
    OperationalError    -> StoreUnavailableError("Event store unavailable: ...")
    SQLAlchemyError     -> DatabaseError("Database operation failed: ...")
    anything else       -> propagated unchanged
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime
from functools import wraps
from types import TracebackType
from typing import Any, Callable, Dict, Optional, Type

# --- Third party imports ---
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

# --- Local imports ---
from lorekeeper.core.exceptions import DatabaseError, StoreUnavailableError
from lorekeeper.core.logging_manager import LorekeeperLogger, safe_logger


def translate_db_error(error: SQLAlchemyError) -> DatabaseError:
    """Map a SQLAlchemy exception onto the project's exception hierarchy."""
    if isinstance(error, IntegrityError):
        return DatabaseError(f"Data integrity violation: {error}")
    if isinstance(error, OperationalError):
        return StoreUnavailableError(f"Event store unavailable: {error}")
    return DatabaseError(f"Database operation failed: {error}")


def log_database_operation(operation_name: str):
    """
    Decorator to log database operations with timing and context.

    Args:
        operation_name: Name of the operation being logged

    Returns:
        Decorator function
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            start_time = datetime.now()
            operation_id = f"{operation_name}_{start_time.strftime('%Y%m%d_%H%M%S_%f')}"
            logger = safe_logger(getattr(self, "logger", None))

            logger.log_debug(
                f"Starting {operation_name}",
                {
                    "operation_id": operation_id,
                    "args_count": len(args),
                    "kwargs_keys": list(kwargs.keys()),
                },
            )

            try:
                result = function(self, *args, **kwargs)
            except Exception as e:
                duration = (datetime.now() - start_time).total_seconds()
                logger.log_error(
                    e,
                    {
                        "operation": operation_name,
                        "operation_id": operation_id,
                        "duration_seconds": duration,
                    },
                )
                raise

            duration = (datetime.now() - start_time).total_seconds()
            logger.log_operation(
                f"{operation_name}_completed",
                {
                    "operation_id": operation_id,
                    "duration_seconds": duration,
                    "success": True,
                },
            )
            return result

        return wrapper

    return decorator


def handle_db_errors(function: Callable) -> Callable:
    """
    Decorator to handle common database errors.

    Args:
        function: Function to wrap

    Returns:
        Wrapped function with error translation
    """

    @wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except SQLAlchemyError as e:
            raise translate_db_error(e) from e

    return wrapper


class DatabaseOperation:
    """
    Context manager that logs a block and translates its database errors.

    Usage:
        with DatabaseOperation(self.logger, "shift_positions", {"timeline_id": 3}):
            ...

    Attributes:
        logger: Optional logger
        operation_name: Name used in log records
        details: Extra context included in every record
        log_start: Whether to log a debug record on entry
    """

    def __init__(
        self,
        logger: Optional[LorekeeperLogger],
        operation_name: str,
        details: Optional[Dict[str, Any]] = None,
        log_start: bool = False,
    ) -> None:
        self.logger = safe_logger(logger)
        self.operation_name = operation_name
        self.details = dict(details or {})
        self.log_start = log_start
        self.start_time: Optional[datetime] = None

    def __enter__(self) -> "DatabaseOperation":
        self.start_time = datetime.now()
        if self.log_start:
            self.logger.log_debug(f"Starting {self.operation_name}", self.details or None)
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> bool:
        duration = (datetime.now() - (self.start_time or datetime.now())).total_seconds()

        if exc_value is None:
            self.logger.log_operation(
                f"{self.operation_name}_completed",
                {**self.details, "duration_seconds": duration, "success": True},
            )
            return False

        if not isinstance(exc_value, Exception):
            return False

        self.logger.log_error(
            exc_value,
            {**self.details, "operation": self.operation_name, "duration_seconds": duration},
        )
        if isinstance(exc_value, SQLAlchemyError):
            raise translate_db_error(exc_value) from exc_value
        return False
