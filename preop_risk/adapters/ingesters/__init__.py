"""Ingestion adapters for batch patient records.

This module contains ingestion adapters that implement the IngestionPort
interface for reading patient records from CSV and JSON sources.
"""

from preop_risk.adapters.ingesters.csv_ingester import CSVIngester
from preop_risk.adapters.ingesters.json_ingester import JSONIngester
from preop_risk.domain.ports import IngestionPort, UnsupportedSourceError

__all__ = ["CSVIngester", "JSONIngester", "get_adapter"]

# Registered adapters, asked in order whether they can read a source
ADAPTERS: tuple[type[IngestionPort], ...] = (CSVIngester, JSONIngester)


def get_adapter(source: str, **kwargs) -> IngestionPort:
    """Pick the first registered adapter whose ``can_ingest`` accepts the source.

    Parameters:
        source: Path to the source file
        **kwargs: Passed to the selected adapter's constructor
            - For CSV: column_mapping, delimiter, chunk_size
            - For JSON: max_file_size

    Raises:
        UnsupportedSourceError: If no adapter accepts the source, or the
            selected adapter rejects the keyword arguments

    Example Usage:
        ```python
        adapter = get_adapter("patients.csv", chunk_size=500)
        for result in adapter.ingest("patients.csv"):
            ...
        ```
    """
    for adapter_class in ADAPTERS:
        if not adapter_class().can_ingest(source):
            continue
        try:
            return adapter_class(**kwargs)
        except TypeError as e:
            raise UnsupportedSourceError(
                f"Failed to create {adapter_class.__name__}: {str(e)}",
                source=source,
                adapter=adapter_class.__name__
            )

    raise UnsupportedSourceError(
        f"No adapter found for source: {source}. Supported formats: CSV, TSV, JSON, JSONL",
        source=source
    )
