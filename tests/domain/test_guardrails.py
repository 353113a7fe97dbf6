"""Tests for the batch CircuitBreaker."""

import pytest

from preop_risk.domain.guardrails import CircuitBreaker, CircuitBreakerConfig, CircuitBreakerOpenError
from preop_risk.domain.ports import Result

OK = Result.success_result("record")
BAD = Result.failure_result(ValueError("bad record"))


class TestCircuitBreaker:
    """Test failure-rate tracking and threshold behaviour."""

    def test_stays_closed_below_min_records(self):
        breaker = CircuitBreaker(CircuitBreakerConfig(min_records_before_check=10))

        for _ in range(9):
            breaker.record_result(BAD)

        assert breaker.is_open() is False

    def test_opens_and_raises_at_threshold(self):
        breaker = CircuitBreaker(CircuitBreakerConfig(failure_threshold_percent=50.0, min_records_before_check=4))
        breaker.record_result(OK)
        breaker.record_result(BAD)
        breaker.record_result(OK)

        with pytest.raises(CircuitBreakerOpenError) as exc_info:
            breaker.record_result(BAD)

        assert exc_info.value.failure_rate == pytest.approx(50.0)
        assert exc_info.value.records_processed == 4
        assert exc_info.value.failures == 2
        assert breaker.is_open() is True

    def test_logs_only_when_abort_disabled(self):
        config = CircuitBreakerConfig(min_records_before_check=2, abort_on_open=False)
        breaker = CircuitBreaker(config)

        breaker.record_result(BAD)
        breaker.record_result(BAD)

        assert breaker.is_open() is True

    def test_closes_when_window_recovers(self):
        config = CircuitBreakerConfig(window_size=4, min_records_before_check=2, abort_on_open=False)
        breaker = CircuitBreaker(config)
        breaker.record_result(BAD)
        breaker.record_result(BAD)
        assert breaker.is_open() is True

        for _ in range(4):
            breaker.record_result(OK)

        assert breaker.is_open() is False

    def test_statistics(self):
        breaker = CircuitBreaker(CircuitBreakerConfig(window_size=3, min_records_before_check=100))
        for result in (OK, BAD, OK, OK):
            breaker.record_result(result)

        stats = breaker.get_statistics()
        assert stats["total_processed"] == 4
        assert stats["total_failures"] == 1
        assert stats["records_in_window"] == 3
        assert stats["failure_rate"] == pytest.approx(100.0 / 3)
