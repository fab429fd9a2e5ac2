"""Pydantic data models for httping measurements.

- Per-request phase timings (TimingRecord)
- Aggregate statistics of a run (LatencySummary)

Both serialize to JSON for the --json output mode:

Example:
    >>> from httping.models import TimingRecord
    >>> TimingRecord(total_ms=12.5).model_dump_json()
"""

from .summary import LatencySummary
from .timing import TimingRecord

__all__ = [
    "LatencySummary",
    "TimingRecord",
]
