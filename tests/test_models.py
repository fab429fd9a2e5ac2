"""Tests for httping data models."""

import json

from httping.models import LatencySummary, TimingRecord


class TestTimingRecord:
    """Tests for TimingRecord."""

    def test_defaults_are_unknown(self) -> None:
        """A fresh record has no measurements."""
        record = TimingRecord()
        assert record.dns_ms is None
        assert record.total_ms is None
        assert record.reused is None
        assert record.status is None

    def test_zero_is_kept(self) -> None:
        record = TimingRecord(dns_ms=0.0, reused=False)
        assert record.dns_ms == 0.0
        assert record.reused is False

    def test_fields_are_assignable(self) -> None:
        record = TimingRecord()
        record.ttfb_ms = 12.5
        record.protocol = "HTTP/2"
        assert record.ttfb_ms == 12.5
        assert record.protocol == "HTTP/2"

    def test_json_serialization(self) -> None:
        record = TimingRecord(total_ms=3.25, status="204 No Content")
        data = json.loads(record.model_dump_json())
        assert data["total_ms"] == 3.25
        assert data["status"] == "204 No Content"
        assert data["connect_ms"] is None


class TestLatencySummary:
    """Tests for LatencySummary."""

    def test_percentiles_default_empty(self) -> None:
        summary = LatencySummary(count=1, min_ms=1, max_ms=1, mean_ms=1)
        assert summary.percentiles == {}

    def test_json_keys(self) -> None:
        summary = LatencySummary(count=2, min_ms=1, max_ms=3, mean_ms=2, percentiles={50: 2})
        data = json.loads(summary.model_dump_json())
        assert data == {
            "count": 2,
            "min_ms": 1.0,
            "max_ms": 3.0,
            "mean_ms": 2.0,
            "percentiles": {"50": 2.0},
        }
