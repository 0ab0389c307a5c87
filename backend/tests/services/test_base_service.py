from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import DependencyFailureException, InvalidInputException, RepositoryException
from app.models.user import User
from app.repositories import RepositoryFactory
from app.services.base import BaseService


class _TimedService(BaseService):
    @BaseService.measure_operation("tick")
    def tick(self, fail: bool = False) -> str:
        if fail:
            raise InvalidInputException("nope")
        return "ok"


def test_transaction_commits(db):
    service = _TimedService(db)
    repo = RepositoryFactory.create_base_repository(db, User)

    with service.transaction():
        carol = repo.create(name="Carol", email="carol@example.com", hashed_password="x")

    db.rollback()
    assert repo.get_by_id(carol.id) is not None


def test_transaction_wraps_store_errors():
    db = MagicMock()
    service = _TimedService(db)

    with pytest.raises(DependencyFailureException) as exc_info:
        with service.transaction():
            raise RepositoryException("disk full")

    db.rollback.assert_called_once()
    db.commit.assert_not_called()
    assert isinstance(exc_info.value.__cause__, RepositoryException)


def test_transaction_rolls_back_domain_errors_unchanged():
    db = MagicMock()
    service = _TimedService(db)

    with pytest.raises(InvalidInputException):
        with service.transaction():
            raise InvalidInputException("bad")

    db.rollback.assert_called_once()


def test_store_access_translates_sqlalchemy_errors():
    service = _TimedService(MagicMock())

    with pytest.raises(DependencyFailureException) as exc_info:
        with service.store_access("list"):
            raise OperationalError("SELECT", {}, Exception("gone"))

    assert exc_info.value.details == {"operation": "list"}


def test_measure_operation_records_success_and_failure():
    service = _TimedService(MagicMock())
    BaseService._class_metrics.pop("_TimedService", None)

    assert service.tick() == "ok"
    with pytest.raises(InvalidInputException):
        service.tick(fail=True)

    metrics = service.get_metrics()["tick"]
    assert metrics["count"] == 2
    assert metrics["success_count"] == 1
    assert metrics["failure_count"] == 1
    assert metrics["avg_time"] >= 0
