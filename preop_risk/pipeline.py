"""Batch assessment pipeline.

Reads a CSV/JSON/JSONL file of patient records through the matching
ingestion adapter, assesses every valid record and collects the results
into a pandas DataFrame, optionally written to CSV or JSON. Bad records are
counted and reported, never fatal, unless the circuit breaker sees the
failure rate cross its threshold.
"""

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from preop_risk.adapters.ingesters import CSVIngester, get_adapter
from preop_risk.domain.enums import RiskTier
from preop_risk.domain.guardrails import CircuitBreaker, CircuitBreakerConfig
from preop_risk.domain.ports import Result, SourceRecord, UnsupportedSourceError
from preop_risk.domain.services import assess_risk, derive_required_resources
from preop_risk.infrastructure.settings import settings

logger = logging.getLogger(__name__)

RESULT_COLUMNS = [
    "record_index",
    "patient_ref",
    "mortality_risk",
    "infection_risk",
    "bleeding_risk",
    "readmission_risk",
    "overall_risk",
    "risk_factors",
    "required_resources",
]

# Separator for list-valued cells in the results file
LIST_SEPARATOR = "; "


@dataclass
class BatchResult:
    """Outcome of one batch run.

    Attributes:
        run_id: Unique identifier of the run (also logged)
        source: The ingested file
        results: One row per assessed record, columns as ``RESULT_COLUMNS``
        failures: One entry per rejected record (index, error type, message)
        output_path: Where ``results`` was written, if anywhere
        breaker_stats: Final circuit breaker statistics, when a breaker ran
    """
    run_id: str
    source: str
    results: pd.DataFrame
    failures: list[dict] = field(default_factory=list)
    output_path: Optional[Path] = None
    breaker_stats: Optional[dict] = None

    @property
    def success_count(self) -> int:
        return len(self.results)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def total_count(self) -> int:
        return self.success_count + self.failure_count

    def tier_counts(self) -> dict[str, int]:
        """Assessed records per overall risk tier, every tier present."""
        counts = {tier.value: 0 for tier in RiskTier}
        if not self.results.empty:
            for tier, count in self.results["overall_risk"].value_counts().items():
                counts[tier] = int(count)
        return counts


def build_breaker_config() -> Optional[CircuitBreakerConfig]:
    """Circuit breaker configuration from settings, or None when disabled."""
    if not settings.circuit_breaker_enabled:
        return None
    return CircuitBreakerConfig(
        failure_threshold_percent=settings.circuit_breaker_threshold,
        window_size=settings.circuit_breaker_window,
        min_records_before_check=settings.circuit_breaker_min_records,
        abort_on_open=settings.circuit_breaker_abort,
    )


def _result_row(source_record: SourceRecord) -> dict:
    assessment = assess_risk(source_record.record)
    resources = derive_required_resources(assessment, source_record.record)
    return {
        "record_index": source_record.record_index,
        "patient_ref": source_record.reference,
        "mortality_risk": assessment.mortality_risk,
        "infection_risk": assessment.infection_risk,
        "bleeding_risk": assessment.bleeding_risk,
        "readmission_risk": assessment.readmission_risk,
        "overall_risk": assessment.overall_risk.value,
        "risk_factors": LIST_SEPARATOR.join(assessment.factor_names()),
        "required_resources": LIST_SEPARATOR.join(resources),
    }


def _failure_entry(result: Result) -> dict:
    details = result.error_details or {}
    return {
        "record_index": details.get("record_index"),
        "error_type": result.error_type,
        "error": result.error,
    }


def write_results(results: pd.DataFrame, output_path: Union[str, Path]) -> Path:
    """Write assessment rows to CSV or JSON, chosen by the file suffix.

    Raises:
        UnsupportedSourceError: If the suffix is neither .csv nor .json
    """
    path = Path(output_path)
    suffix = path.suffix.lower()
    if suffix not in (".csv", ".json"):
        raise UnsupportedSourceError(
            f"Unsupported output format '{suffix or path.name}': use .csv or .json",
            source=str(path)
        )

    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        results.to_csv(path, index=False)
    else:
        results.to_json(path, orient="records", indent=2)
    return path


def process_batch(
    source: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    chunk_size: Optional[int] = None,
    breaker_config: Optional[CircuitBreakerConfig] = None,
    use_circuit_breaker: bool = True,
) -> BatchResult:
    """Assess every record in a batch file.

    Parameters:
        source: CSV, TSV, JSON or JSONL file of patient records
        output_path: Optional .csv/.json file for the results
        chunk_size: CSV read chunk size (defaults to settings)
        breaker_config: Circuit breaker settings (defaults to settings)
        use_circuit_breaker: Set False to assess every record regardless of
            the failure rate

    Raises:
        SourceNotFoundError: If the source file does not exist
        UnsupportedSourceError: If no adapter handles the source, or the
            output suffix is not supported
        CircuitBreakerOpenError: If the failure rate crosses the threshold
            and the breaker is configured to abort
    """
    source = str(source)
    run_id = str(uuid.uuid4())

    adapter = get_adapter(source)
    if isinstance(adapter, CSVIngester):
        adapter.chunk_size = chunk_size or settings.chunk_size
    source_info = adapter.get_source_info(source) or {}
    logger.info(
        f"Starting batch run {run_id} from {source} with {adapter.__class__.__name__} "
        f"({source_info.get('size', 'unknown')} bytes)",
        extra={"run_id": run_id, "source": source}
    )

    circuit_breaker = None
    if use_circuit_breaker:
        config = breaker_config or build_breaker_config()
        if config is not None:
            circuit_breaker = CircuitBreaker(config)

    rows: list[dict] = []
    failures: list[dict] = []
    for result in adapter.ingest(source):
        if circuit_breaker:
            circuit_breaker.record_result(result)

        if result.is_success():
            rows.append(_result_row(result.value))
        else:
            failures.append(_failure_entry(result))

    results = pd.DataFrame(rows, columns=RESULT_COLUMNS)
    batch = BatchResult(run_id=run_id, source=source, results=results, failures=failures)
    if circuit_breaker:
        batch.breaker_stats = circuit_breaker.get_statistics()
        if circuit_breaker.is_open():
            logger.warning(
                f"Batch run {run_id} finished with the circuit breaker open "
                f"({batch.breaker_stats['failure_rate']:.1f}% of the last "
                f"{batch.breaker_stats['records_in_window']} records rejected)",
                extra={"run_id": run_id, "source": source}
            )

    if output_path is not None:
        batch.output_path = write_results(results, output_path)
        logger.info(f"Wrote {len(results)} assessments to {batch.output_path}")

    logger.info(
        f"Batch run {run_id} complete: {batch.success_count} assessed, "
        f"{batch.failure_count} rejected",
        extra={"run_id": run_id, "source": source}
    )
    return batch
