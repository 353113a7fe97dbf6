"""Tests for ingestion adapter selection."""

import pytest

from preop_risk.adapters import ingesters
from preop_risk.adapters.ingesters import CSVIngester, JSONIngester, get_adapter
from preop_risk.domain.ports import UnsupportedSourceError


class TestGetAdapter:
    """Test the adapter factory."""

    @pytest.mark.parametrize("source, adapter_class", [
        ("patients.csv", CSVIngester),
        ("patients.tsv", CSVIngester),
        ("patients.json", JSONIngester),
        ("PATIENTS.JSONL", JSONIngester),
    ])
    def test_selects_by_extension(self, source, adapter_class):
        assert isinstance(get_adapter(source), adapter_class)

    def test_passes_keyword_arguments(self):
        adapter = get_adapter("patients.csv", chunk_size=50)

        assert adapter.chunk_size == 50

    def test_unknown_extension(self):
        with pytest.raises(UnsupportedSourceError, match="No adapter found"):
            get_adapter("patients.xml")

    def test_rejected_keyword_arguments(self):
        with pytest.raises(UnsupportedSourceError, match="JSONIngester"):
            get_adapter("patients.json", chunk_size=50)

    def test_asks_each_adapter_can_ingest(self, monkeypatch):
        class BundleIngester(JSONIngester):
            def can_ingest(self, source):
                return source.endswith(".bundle")

        monkeypatch.setattr(ingesters, "ADAPTERS", (CSVIngester, BundleIngester))

        assert isinstance(get_adapter("patients.bundle"), BundleIngester)
        with pytest.raises(UnsupportedSourceError, match="No adapter found"):
            get_adapter("patients.json")
