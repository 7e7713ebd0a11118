# backend/drivigo/services/base.py
"""
Base Service Pattern for the Drivigo platform

Provides common functionality for all service classes:
- Transaction management
- Logging
- Performance monitoring (Prometheus)
"""

import asyncio
from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    """
    Base class for all service layer components.

    Services own transaction boundaries; repositories only flush.
    """

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions.

        Usage:
            with self.transaction():
                self.repository.create(...)
                # commit is handled automatically
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            self.logger.error("Transaction failed: %s", e)
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {e}") from e
        except Exception as e:
            self.logger.error("Unexpected error in transaction: %s", e)
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("create_booking")
            def create_booking(self, data):
                ...
        """

        def decorator(func: F) -> F:
            if asyncio.iscoroutinefunction(func):

                @wraps(func)
                async def async_wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                    start_time = time.time()
                    error_type = None
                    try:
                        return await func(self, *args, **kwargs)
                    except Exception as e:
                        error_type = type(e).__name__
                        raise
                    finally:
                        _finish_measurement(self, operation_name, start_time, error_type)

                return cast(F, async_wrapper)

            @wraps(func)
            def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                start_time = time.time()
                error_type = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    _finish_measurement(self, operation_name, start_time, error_type)

            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """Log an operation with structured context."""
        self.logger.info("Operation: %s", operation, extra={"operation": operation, **context})


def _finish_measurement(
    service: Any, operation_name: str, start_time: float, error_type: str | None
) -> None:
    elapsed = time.time() - start_time
    success = error_type is None

    if elapsed > SLOW_OPERATION_SECONDS:
        getattr(service, "logger", logger).warning(
            "Slow operation detected: %s took %.2fs", operation_name, elapsed
        )

    try:
        prometheus_metrics.record_service_operation(
            service=service.__class__.__name__,
            operation=operation_name,
            duration=elapsed,
            status="success" if success else "error",
            error_type=error_type,
        )
    except Exception as exc:  # metrics must never break the operation
        logger.debug("Failed to record metrics for %s: %s", operation_name, exc)
