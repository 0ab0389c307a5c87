# backend/app/services/base.py
"""
Common plumbing for GymBook services.

Every service gets a session, a class-named logger, a commit/rollback
context manager and an opt-in timing decorator. Store failures leave the
service layer as ``DependencyFailureException``; domain exceptions pass
through untouched.
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Iterator, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import DependencyFailureException, RepositoryException

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0

_STORE_ERRORS = (SQLAlchemyError, RepositoryException)


def _empty_metric() -> Dict[str, float]:
    return {
        "count": 0,
        "total_time": 0.0,
        "success_count": 0,
        "failure_count": 0,
        "min_time": float("inf"),
        "max_time": 0.0,
    }


class BaseService:
    """Parent of every service that talks to the database."""

    # {service class name: {operation: counters}}
    _class_metrics: Dict[str, Dict[str, Dict[str, float]]] = {}

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Run a unit of work and commit it when the block exits cleanly.

            with self.transaction():
                self.repository.create(...)

        Anything raised inside the block triggers a rollback. Store errors
        are re-raised as ``DependencyFailureException`` chained to the cause.
        """
        try:
            yield self.db
            self.db.commit()
        except _STORE_ERRORS as exc:
            self.db.rollback()
            self.logger.error("Rolled back unit of work after store error: %s", exc)
            raise DependencyFailureException(f"Database operation failed: {exc}") from exc
        except Exception:
            self.db.rollback()
            raise
        self.logger.debug("Unit of work committed")

    @contextmanager
    def store_access(self, operation: str) -> Iterator[None]:
        """Wrap read-only repository calls with the same error translation."""
        try:
            yield
        except _STORE_ERRORS as exc:
            self.logger.error(
                "Read failed during %s: %s", operation, exc, extra={"operation": operation}
            )
            raise DependencyFailureException(
                f"Database operation failed: {exc}", operation=operation
            ) from exc

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method and record the outcome under ``operation_name``.

            @BaseService.measure_operation("create_session")
            def create_session(self, client_id, data): ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self, *args, **kwargs):
                started = time.perf_counter()
                ok = False
                try:
                    outcome = func(self, *args, **kwargs)
                    ok = True
                    return outcome
                finally:
                    elapsed = time.perf_counter() - started
                    self._record_metric(operation_name, elapsed, ok)
                    if elapsed > SLOW_OPERATION_SECONDS:
                        self.logger.warning("%s took %.2fs", operation_name, elapsed)

            wrapper._operation_name = operation_name  # type: ignore[attr-defined]
            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

    def _record_metric(self, operation: str, elapsed: float, success: bool) -> None:
        per_class = BaseService._class_metrics.setdefault(self.__class__.__name__, {})
        entry = per_class.setdefault(operation, _empty_metric())

        entry["count"] += 1
        entry["total_time"] += elapsed
        entry["min_time"] = min(entry["min_time"], elapsed)
        entry["max_time"] = max(entry["max_time"], elapsed)
        entry["success_count" if success else "failure_count"] += 1

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """Counters for this service class, each with a derived ``avg_time``."""
        recorded = BaseService._class_metrics.get(self.__class__.__name__, {})
        return {
            operation: {**data, "avg_time": data["total_time"] / (data["count"] or 1)}
            for operation, data in recorded.items()
        }
