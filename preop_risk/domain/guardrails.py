"""Domain Guardrails - Circuit Breaker for batch assessment runs.

A batch file full of malformed records usually means a wrong export or a
wrong column layout rather than a handful of typos. The CircuitBreaker
watches the failure rate of ingested records and aborts the run once it
crosses a threshold, instead of emitting a results file that is mostly
rejections.

Architecture:
    - Pure domain logic with no infrastructure dependencies
    - Works with the Result type from ports
    - Thread-safe counters for concurrent producers
"""

import logging
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Optional

from preop_risk.domain.ports import Result

logger = logging.getLogger(__name__)


@dataclass
class CircuitBreakerConfig:
    """Configuration for CircuitBreaker behavior.

    Attributes:
        failure_threshold_percent: Failure percentage that opens the circuit (0-100)
        window_size: Number of most recent records considered
        min_records_before_check: Records processed before the threshold is checked
        abort_on_open: If True, raise CircuitBreakerOpenError when the circuit opens;
                      if False, only log and continue
    """
    failure_threshold_percent: float = 50.0
    window_size: int = 100
    min_records_before_check: int = 10
    abort_on_open: bool = True


class CircuitBreakerOpenError(Exception):
    """Raised when the CircuitBreaker opens due to excessive failures.

    Attributes:
        failure_rate: The failure rate percentage in the window
        threshold: The configured threshold that was reached
        records_processed: Records processed when the circuit opened
        failures: Total failures when the circuit opened
    """

    def __init__(
        self,
        message: str,
        failure_rate: float,
        threshold: float,
        records_processed: int,
        failures: int
    ):
        super().__init__(message)
        self.failure_rate = failure_rate
        self.threshold = threshold
        self.records_processed = records_processed
        self.failures = failures


class CircuitBreaker:
    """Sliding-window failure monitor for ingested records.

    Example Usage:
        ```python
        breaker = CircuitBreaker(CircuitBreakerConfig(failure_threshold_percent=25.0))

        for result in adapter.ingest(source):
            breaker.record_result(result)   # may raise CircuitBreakerOpenError
            if result.is_success():
                assess_risk(result.value)
        ```
    """

    def __init__(self, config: Optional[CircuitBreakerConfig] = None):
        self.config = config or CircuitBreakerConfig()
        self._results: deque[bool] = deque(maxlen=self.config.window_size)
        self._lock = Lock()
        self._is_open = False
        self._total_processed = 0
        self._total_failures = 0

    def record_result(self, result: Result) -> None:
        """Record one ingested record's outcome and re-check the threshold.

        Raises:
            CircuitBreakerOpenError: If abort_on_open=True and the threshold is reached
        """
        with self._lock:
            is_success = result.is_success()
            self._results.append(is_success)
            self._total_processed += 1
            if not is_success:
                self._total_failures += 1

            if self._total_processed >= self.config.min_records_before_check:
                self._check_threshold()

    def _check_threshold(self) -> None:
        if not self._results:
            return

        failures_in_window = sum(1 for ok in self._results if not ok)
        total_in_window = len(self._results)
        failure_rate = (failures_in_window / total_in_window) * 100.0

        if failure_rate >= self.config.failure_threshold_percent:
            if not self._is_open:
                self._is_open = True
                logger.error(
                    f"CircuitBreaker OPEN: Failure rate {failure_rate:.1f}% "
                    f"exceeds threshold {self.config.failure_threshold_percent}% "
                    f"(failures: {failures_in_window}/{total_in_window} in window, "
                    f"total: {self._total_failures}/{self._total_processed})"
                )
                if self.config.abort_on_open:
                    raise CircuitBreakerOpenError(
                        f"CircuitBreaker opened: {failure_rate:.1f}% failure rate "
                        f"exceeds threshold {self.config.failure_threshold_percent}%",
                        failure_rate=failure_rate,
                        threshold=self.config.failure_threshold_percent,
                        records_processed=self._total_processed,
                        failures=self._total_failures
                    )
        elif self._is_open:
            self._is_open = False
            logger.info(
                f"CircuitBreaker CLOSED: Failure rate {failure_rate:.1f}% "
                f"is below threshold {self.config.failure_threshold_percent}%"
            )

    def is_open(self) -> bool:
        with self._lock:
            return self._is_open

    def get_statistics(self) -> dict:
        """Snapshot of counters, window contents and threshold settings."""
        with self._lock:
            failures_in_window = sum(1 for ok in self._results if not ok)
            total_in_window = len(self._results)
            failure_rate = (failures_in_window / total_in_window * 100.0) if total_in_window > 0 else 0.0

            return {
                'is_open': self._is_open,
                'total_processed': self._total_processed,
                'total_failures': self._total_failures,
                'window_size': self.config.window_size,
                'records_in_window': total_in_window,
                'failures_in_window': failures_in_window,
                'failure_rate': failure_rate,
                'threshold': self.config.failure_threshold_percent,
                'min_records_before_check': self.config.min_records_before_check,
            }
