"""JSON Patient Record Ingestion Adapter.

This adapter implements the IngestionPort contract for JSON and JSON Lines
sources. Each record is validated independently; a malformed record becomes
a failure Result and is logged as a rejection, it never stops the run.

Accepted layouts:
    - Array of records: ``[{...}, {...}]``
    - Wrapped array: ``{"patients": [{...}, ...]}``
    - Single record object: ``{"demographics": {...}, ...}``
    - JSON Lines (``.jsonl``): one record object per line
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional

from preop_risk.domain.patient_record import PatientRecord, validate_patient_record
from preop_risk.domain.ports import (
    IngestionPort,
    Result,
    SourceRecord,
    SourceNotFoundError,
    TransformationError,
    UnsupportedSourceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Optional key holding the caller's own patient reference
REFERENCE_KEY = "patientRef"


@dataclass(frozen=True)
class _UndecodableLine:
    """Placeholder for a JSON Lines entry that is not valid JSON."""
    line_number: int
    error: str


class JSONIngester(IngestionPort):
    """JSON / JSONL ingestion adapter with per-record triage.

    Parameters:
        max_file_size: Largest source accepted, in bytes (default: 100MB)
    """

    def __init__(self, max_file_size: int = 100 * 1024 * 1024):
        self.max_file_size = max_file_size
        self.adapter_name = "json_ingester"

    def can_ingest(self, source: str) -> bool:
        if not source:
            return False
        return source.lower().endswith(('.json', '.jsonl'))

    def get_source_info(self, source: str) -> Optional[dict]:
        try:
            source_path = Path(source)
            if source_path.exists():
                return {
                    'format': 'jsonl' if source_path.suffix.lower() == '.jsonl' else 'json',
                    'size': source_path.stat().st_size,
                    'encoding': 'utf-8',
                    'exists': True,
                }
        except (OSError, ValueError):
            pass
        return None

    def ingest(self, source: str) -> Iterator[Result[SourceRecord]]:
        """Ingest a JSON/JSONL file and yield one Result per record.

        Raises:
            SourceNotFoundError: If the file does not exist or cannot be read
            UnsupportedSourceError: If the file is not valid JSON or is too large
        """
        source_path = Path(source)
        if not source_path.exists():
            raise SourceNotFoundError(f"JSON source not found: {source}", source=source)

        file_size = source_path.stat().st_size
        if file_size > self.max_file_size:
            raise UnsupportedSourceError(
                f"JSON source {source} is {file_size} bytes, above the {self.max_file_size} byte limit",
                source=source,
                adapter=self.adapter_name
            )

        records = self._load_records(source_path)
        if not records:
            logger.warning(f"No records found in {source}")
            return

        processed = 0
        rejected = 0
        for record_index, raw_record in enumerate(records):
            processed += 1
            try:
                patient = self._triage_and_transform(raw_record, source, record_index)
                reference = raw_record.get(REFERENCE_KEY)
                yield Result.success_result(SourceRecord(
                    record=patient,
                    record_index=record_index,
                    reference=str(reference) if reference is not None else None,
                ))
            except (ValidationError, TransformationError) as e:
                rejected += 1
                self._log_rejection(source, record_index, e, raw_record)
                yield Result.failure_result(
                    e,
                    error_details={
                        'source': source,
                        'record_index': record_index,
                        **getattr(e, 'details', {}),
                    }
                )

        logger.info(f"Ingested {processed} records from {source} ({rejected} rejected)")

    def _load_records(self, source_path: Path) -> list[Any]:
        source = str(source_path)
        try:
            with open(source_path, 'r', encoding='utf-8') as f:
                if source_path.suffix.lower() == '.jsonl':
                    return [
                        self._decode_line(line, line_number)
                        for line_number, line in enumerate(f, start=1)
                        if line.strip()
                    ]
                raw_data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise UnsupportedSourceError(
                f"Invalid JSON format in {source}: {str(e)}",
                source=source,
                adapter=self.adapter_name
            )
        except OSError as e:
            raise SourceNotFoundError(f"Cannot read JSON source {source}: {str(e)}", source=source)

        return self._extract_records(raw_data, source)

    def _decode_line(self, line: str, line_number: int) -> Any:
        try:
            return json.loads(line)
        except json.JSONDecodeError as e:
            return _UndecodableLine(line_number=line_number, error=str(e))

    def _extract_records(self, raw_data: Any, source: str) -> list[Any]:
        if isinstance(raw_data, list):
            return raw_data
        if isinstance(raw_data, dict):
            patients = raw_data.get('patients')
            if isinstance(patients, list):
                return patients
            return [raw_data]
        raise UnsupportedSourceError(
            f"Unsupported JSON structure: expected array or object, got {type(raw_data).__name__}",
            source=source,
            adapter=self.adapter_name
        )

    def _triage_and_transform(self, raw_record: Any, source: str, record_index: int) -> PatientRecord:
        """Turn one raw JSON value into a PatientRecord.

        Raises:
            TransformationError: If the value is not an object, or is a JSON
                Lines entry that could not be decoded
            ValidationError: If the object fails schema validation
        """
        if isinstance(raw_record, _UndecodableLine):
            raise TransformationError(
                f"Record {record_index} (line {raw_record.line_number}) is not valid JSON: {raw_record.error}",
                source=source,
                raw_data={"record_index": record_index, "line_number": raw_record.line_number}
            )
        if not isinstance(raw_record, dict):
            raise TransformationError(
                f"Record {record_index} is not an object",
                source=source,
                raw_data={"record_index": record_index, "type": type(raw_record).__name__}
            )
        return validate_patient_record(raw_record, source=source)

    def _log_rejection(self, source: str, record_index: int, error: Exception, raw_record: Any) -> None:
        logger.warning(
            f"REJECTED: Record {record_index} from {source}: {error}",
            extra={
                'rejection_type': 'validation_failure',
                'source': source,
                'record_index': record_index,
                'error_type': type(error).__name__,
                'raw_record_preview': self._truncate_for_logging(raw_record),
            }
        )

    def _truncate_for_logging(self, data: Any, max_size: int = 500) -> str:
        data_str = json.dumps(data, default=str)
        if len(data_str) <= max_size:
            return data_str
        return data_str[:max_size] + f"... ({len(data_str)} chars)"
