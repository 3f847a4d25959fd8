"""
Tests for BaseService transaction handling and operation metrics.
"""

import logging
from unittest.mock import Mock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from service_booking.core.exceptions import NotFoundException, ServiceException
from service_booking.monitoring.prometheus_metrics import REGISTRY
from service_booking.services import base as base_module
from service_booking.services.base import BaseService


class SampleService(BaseService):
    @BaseService.measure_operation("do_work")
    def do_work(self, fail: bool = False) -> str:
        if fail:
            raise NotFoundException("missing")
        return "done"


@pytest.fixture
def service():
    return SampleService(Mock())


def _operations(status: str) -> float:
    value = REGISTRY.get_sample_value(
        "service_booking_service_operations_total",
        {"service": "SampleService", "operation": "do_work", "status": status},
    )
    return value or 0.0


class TestTransaction:
    def test_commits_on_success(self, service):
        with service.transaction():
            pass
        service.db.commit.assert_called_once()
        service.db.rollback.assert_not_called()

    def test_database_errors_become_service_exception(self, service):
        with pytest.raises(ServiceException) as exc_info:
            with service.transaction():
                raise SQLAlchemyError("connection lost")

        assert "connection lost" in exc_info.value.message
        service.db.rollback.assert_called_once()
        service.db.commit.assert_not_called()

    def test_domain_errors_roll_back_and_propagate(self, service):
        with pytest.raises(NotFoundException):
            with service.transaction():
                raise NotFoundException("Booking not found")

        service.db.rollback.assert_called_once()


class TestMeasureOperation:
    def test_successes_and_failures_are_exported(self, service):
        successes, errors = _operations("success"), _operations("error")

        assert service.do_work() == "done"
        with pytest.raises(NotFoundException):
            service.do_work(fail=True)

        assert _operations("success") == successes + 1
        assert _operations("error") == errors + 1
        assert REGISTRY.get_sample_value(
            "service_booking_errors_total",
            {"service": "SampleService", "operation": "do_work", "error_type": "NotFoundException"},
        ) >= 1

    def test_wrapper_keeps_the_method_name(self):
        assert SampleService.do_work.__name__ == "do_work"

    def test_slow_operation_is_logged(self, service, caplog):
        with patch.object(base_module, "SLOW_OPERATION_SECONDS", -1.0):
            with caplog.at_level(logging.WARNING, logger="SampleService"):
                service.do_work()

        assert "Slow operation detected: do_work" in caplog.text

    def test_metrics_failure_does_not_break_the_operation(self, service):
        with patch.object(
            base_module.prometheus_metrics,
            "record_service_operation",
            side_effect=RuntimeError("registry down"),
        ):
            assert service.do_work() == "done"
