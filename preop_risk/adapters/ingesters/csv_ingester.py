"""CSV Patient Record Ingestion Adapter.

This adapter implements the IngestionPort contract for flat CSV exports,
one patient per row. Rows are read in chunks with pandas and reshaped into
the nested record layout before validation. A bad row becomes a failure
Result and is logged as a rejection; it never stops the run.

Default columns (header matching ignores case, spaces, underscores and
hyphens, so ``systolic_bp``, ``Systolic BP`` and ``systolicBP`` all match):

    age, gender, bmi, systolic_bp, diastolic_bp, heart_rate, temperature,
    oxygen_saturation, hemoglobin, white_blood_cells, platelets, creatinine,
    glucose, comorbidities, surgery_type, surgery_complexity

An optional ``patient_ref`` column is carried through as the record's
reference. Comorbidities are separated by ``;`` or ``|``.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import pandas as pd

from preop_risk.domain.patient_record import PatientRecord, validate_patient_record
from preop_risk.domain.ports import (
    IngestionPort,
    Result,
    SourceNotFoundError,
    SourceRecord,
    TransformationError,
    UnsupportedSourceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# canonical column -> (record section, wire key); section None means top level
RECORD_COLUMNS: Dict[str, tuple[Optional[str], str]] = {
    "age": ("demographics", "age"),
    "gender": ("demographics", "gender"),
    "bmi": ("demographics", "bodyMassIndex"),
    "systolic_bp": ("vitals", "systolicBP"),
    "diastolic_bp": ("vitals", "diastolicBP"),
    "heart_rate": ("vitals", "heartRate"),
    "temperature": ("vitals", "temperature"),
    "oxygen_saturation": ("vitals", "oxygenSaturation"),
    "hemoglobin": ("labs", "hemoglobin"),
    "white_blood_cells": ("labs", "whiteBloodCells"),
    "platelets": ("labs", "platelets"),
    "creatinine": ("labs", "creatinine"),
    "glucose": ("labs", "glucose"),
    "comorbidities": (None, "comorbidities"),
    "surgery_type": (None, "surgeryType"),
    "surgery_complexity": (None, "surgeryComplexity"),
}
REFERENCE_COLUMN = "patient_ref"

# Extra header spellings beyond case/separator differences
_HEADER_ALIASES = {
    "bodymassindex": "bmi",
    "patientreference": REFERENCE_COLUMN,
}


def _compact(header: str) -> str:
    return re.sub(r"[^a-z0-9]", "", str(header).lower())


class CSVIngester(IngestionPort):
    """CSV ingestion adapter with configurable column mapping.

    Parameters:
        column_mapping: Canonical column name -> header used in the file, for
                        exports whose headers cannot be matched automatically
        delimiter: Field delimiter (default ','; '.tsv' files use tab)
        chunk_size: Rows read per pandas chunk
    """

    def __init__(
        self,
        column_mapping: Optional[Dict[str, str]] = None,
        delimiter: str = ',',
        chunk_size: int = 1000
    ):
        self.column_mapping = column_mapping or {}
        self.delimiter = delimiter
        self.chunk_size = chunk_size
        self.adapter_name = "csv_ingester"

    def can_ingest(self, source: str) -> bool:
        if not source:
            return False
        return source.lower().endswith(('.csv', '.tsv'))

    def get_source_info(self, source: str) -> Optional[dict]:
        try:
            source_path = Path(source)
            if source_path.exists():
                return {
                    'format': 'csv',
                    'size': source_path.stat().st_size,
                    'encoding': 'utf-8',
                    'exists': True,
                    'delimiter': self._delimiter_for(source_path),
                }
        except (OSError, ValueError):
            pass
        return None

    def ingest(self, source: str) -> Iterator[Result[SourceRecord]]:
        """Ingest a CSV file and yield one Result per row.

        Raises:
            SourceNotFoundError: If the file does not exist or cannot be read
            UnsupportedSourceError: If the file cannot be parsed as CSV or
                lacks required columns
        """
        source_path = Path(source)
        if not source_path.exists():
            raise SourceNotFoundError(f"CSV source not found: {source}", source=source)

        try:
            reader = pd.read_csv(
                source_path,
                sep=self._delimiter_for(source_path),
                dtype=str,
                keep_default_na=False,
                chunksize=self.chunk_size,
                skipinitialspace=True,
            )
        except pd.errors.EmptyDataError:
            logger.warning(f"No records found in {source}")
            return
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise UnsupportedSourceError(
                f"Invalid CSV format in {source}: {str(e)}",
                source=source,
                adapter=self.adapter_name
            )

        record_index = 0
        rejected = 0
        with reader:
            for chunk_number, chunk in enumerate(self._read_chunks(reader, source), start=1):
                chunk = self._map_columns(chunk, source)
                logger.debug(f"Chunk {chunk_number} from {source}: {len(chunk)} rows")
                for row in chunk.to_dict(orient="records"):
                    try:
                        patient = self._triage_and_transform(row, source, record_index)
                        yield Result.success_result(SourceRecord(
                            record=patient,
                            record_index=record_index,
                            reference=row.get(REFERENCE_COLUMN) or None,
                        ))
                    except (ValidationError, TransformationError) as e:
                        rejected += 1
                        self._log_rejection(source, record_index, e)
                        yield Result.failure_result(
                            e,
                            error_details={
                                'source': source,
                                'record_index': record_index,
                                **getattr(e, 'details', {}),
                            }
                        )
                    record_index += 1

        logger.info(f"Ingested {record_index} rows from {source} ({rejected} rejected)")

    def _read_chunks(self, reader, source: str) -> Iterator[pd.DataFrame]:
        """Iterate pandas chunks, turning parse failures into UnsupportedSourceError.

        A malformed line can sit in any chunk, so errors surface while
        iterating rather than when the reader is opened.
        """
        try:
            for chunk in reader:
                yield chunk
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise UnsupportedSourceError(
                f"Invalid CSV format in {source}: {str(e)}",
                source=source,
                adapter=self.adapter_name
            ) from e

    def _delimiter_for(self, source_path: Path) -> str:
        if source_path.suffix.lower() == '.tsv':
            return '\t'
        return self.delimiter

    def _map_columns(self, chunk: pd.DataFrame, source: str) -> pd.DataFrame:
        """Rename file headers to canonical column names.

        Raises:
            UnsupportedSourceError: If any record column is missing entirely
        """
        explicit = {header: column for column, header in self.column_mapping.items()}
        known = {_compact(column): column for column in [*RECORD_COLUMNS, REFERENCE_COLUMN]}
        known.update(_HEADER_ALIASES)

        renames = {}
        for header in chunk.columns:
            if header in explicit:
                renames[header] = explicit[header]
            elif _compact(header) in known:
                renames[header] = known[_compact(header)]
        mapped = chunk.rename(columns=renames)

        missing = [column for column in RECORD_COLUMNS if column not in mapped.columns]
        # A missing comorbidities column just means none recorded
        missing = [column for column in missing if column != "comorbidities"]
        if missing:
            raise UnsupportedSourceError(
                f"CSV source {source} is missing required columns: {', '.join(missing)}",
                source=source,
                adapter=self.adapter_name
            )
        return mapped

    def _triage_and_transform(self, row: Dict[str, Any], source: str, record_index: int) -> PatientRecord:
        """Reshape one flat row into the nested record layout and validate it.

        Blank cells are treated as missing values.

        Raises:
            ValidationError: If the reshaped row fails schema validation
        """
        nested: Dict[str, Any] = {"demographics": {}, "vitals": {}, "labs": {}}
        for column, (section, key) in RECORD_COLUMNS.items():
            value = row.get(column)
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            if section is None:
                nested[key] = value
            else:
                nested[section][key] = value
        return validate_patient_record(nested, source=source)

    def _log_rejection(self, source: str, record_index: int, error: Exception) -> None:
        logger.warning(
            f"REJECTED: Row {record_index} from {source}: {error}",
            extra={
                'rejection_type': 'validation_failure',
                'source': source,
                'record_index': record_index,
                'error_type': type(error).__name__,
            }
        )
