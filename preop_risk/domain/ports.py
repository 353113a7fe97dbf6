"""Domain Ports - Result type, error hierarchy and ingestion contract.

This module defines the contracts shared between the scoring core and the
adapters that feed it. The core never reads files or sockets itself; adapters
implement ``IngestionPort`` and hand validated ``PatientRecord`` objects in.

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - Adapters (CSV, JSON, ...) implement these ports
    - Record-level failures travel as ``Result`` values so guardrails can
      monitor failure rates without exception handling
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Iterator, Optional, TypeVar, Union

if TYPE_CHECKING:
    from preop_risk.domain.patient_record import PatientRecord

T = TypeVar('T')


# ============================================================================
# Result Type for Success/Failure Communication
# ============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """Result type for communicating success or failure without exceptions.

    Attributes:
        success: True if the operation succeeded, False otherwise
        value: The successful result value (only present if success=True)
        error: Error message (only present if success=False)
        error_type: Type of error (ValidationError, TransformationError, etc.)
        error_details: Additional error context (source, record_index, etc.)

    Example:
        ```python
        result = Result.success_result(record)
        if result.is_success():
            assess_risk(result.value)

        result = Result.failure_result(
            ValidationError("age: field required"),
            error_details={"source": "patients.csv", "record_index": 5}
        )
        ```
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_details: Optional[dict] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        """Create a successful result."""
        return cls(success=True, value=value)

    @classmethod
    def failure_result(
        cls,
        error: Union[str, Exception],
        error_type: Optional[str] = None,
        error_details: Optional[dict] = None
    ) -> 'Result[T]':
        """Create a failure result.

        Parameters:
            error: Error message or exception
            error_type: Type of error; defaults to the exception class name
            error_details: Additional context (source, record_index, etc.)
        """
        error_message = str(error) if isinstance(error, Exception) else error
        error_type_name = error_type or (type(error).__name__ if isinstance(error, Exception) else "UnknownError")

        return cls(
            success=False,
            value=None,
            error=error_message,
            error_type=error_type_name,
            error_details=error_details or {}
        )

    def is_success(self) -> bool:
        return self.success

    def is_failure(self) -> bool:
        return not self.success


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================

class AssessmentError(Exception):
    """Base exception for all risk assessment errors."""
    pass


class ValidationError(AssessmentError):
    """Raised when input data cannot become a valid PatientRecord.

    Covers missing fields, non-finite numbers, out-of-range values and values
    outside an enumerated vocabulary. Raised before any scoring happens.

    Attributes:
        source: The source identifier that failed validation (if any)
        details: Additional error details, including the field-level errors
    """

    def __init__(self, message: str, source: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message)
        self.source = source
        self.details = details or {}


class TransformationError(AssessmentError):
    """Raised when a raw row cannot be reshaped into record form.

    Attributes:
        source: The source identifier that failed transformation
        raw_data: The raw data that failed transformation (may be truncated)
    """

    def __init__(self, message: str, source: Optional[str] = None, raw_data: Optional[dict] = None):
        super().__init__(message)
        self.source = source
        self.raw_data = raw_data


class SourceNotFoundError(AssessmentError):
    """Raised when a source file cannot be found or read."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class UnsupportedSourceError(AssessmentError):
    """Raised when a source format is not supported by any adapter.

    Attributes:
        source: The source identifier that is unsupported
        adapter: The adapter that cannot handle the source
    """

    def __init__(self, message: str, source: Optional[str] = None, adapter: Optional[str] = None):
        super().__init__(message)
        self.source = source
        self.adapter = adapter


@dataclass(frozen=True)
class SourceRecord:
    """A validated record together with where it came from.

    Attributes:
        record: The validated patient record
        record_index: Zero-based position of the record in its source
        reference: Caller-supplied patient reference, if the source has one
    """
    record: 'PatientRecord'
    record_index: int
    reference: Optional[str] = None


class IngestionPort(ABC):
    """Abstract contract for patient record ingestion adapters.

    Key Principles:
        - Streaming: yields records one by one
        - Validated: successful results always hold a PatientRecord
        - Fail-safe: a bad record becomes a failure Result, never an exception
    """

    @abstractmethod
    def ingest(self, source: str) -> Iterator[Result[SourceRecord]]:
        """Read a source and yield one Result per record.

        Parameters:
            source: Path to the source file

        Yields:
            Result[SourceRecord]: success with the validated record, or
            failure carrying the error type and ``record_index`` details

        Raises:
            SourceNotFoundError: If the source does not exist or cannot be read
            UnsupportedSourceError: If the source is not in the adapter's format
        """
        pass

    @abstractmethod
    def can_ingest(self, source: str) -> bool:
        """Check if this adapter can handle the given source."""
        pass

    def get_source_info(self, source: str) -> Optional[dict]:
        """Get metadata about the source (optional, adapter-specific)."""
        return None
