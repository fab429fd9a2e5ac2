"""Output formatting for httping."""

import json
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.text import Text

from .constants import FIELD_WIDTH, PERCENTILES
from .models import LatencySummary, TimingRecord

GOOD = "bright_green"
BAD = "bright_red"
NOT_AVAILABLE = "N/A"


def format_ms(value: float | None) -> str | None:
    """Format a duration as ``12.3ms``; None stays None."""
    if value is None:
        return None
    return f"{value:.1f}ms"


def result_fields(record: TimingRecord, error: str | None) -> list[tuple[str, str, str]]:
    """Build the (name, value, style) triples of a result line.

    Present values are green and missing ones red, except for the error
    field where it is the other way round.
    """

    def field(name: str, value: str | None) -> tuple[str, str, str]:
        if value is None:
            return name, NOT_AVAILABLE, BAD
        return name, value, GOOD

    if record.reused is None:
        reused = ("reused", NOT_AVAILABLE, BAD)
    else:
        reused = ("reused", str(record.reused).lower(), GOOD if record.reused else BAD)

    return [
        field("dns", format_ms(record.dns_ms)),
        field("conn", format_ms(record.connect_ms)),
        field("tls", format_ms(record.tls_ms)),
        field("ttfb", format_ms(record.ttfb_ms)),
        field("dl", format_ms(record.download_ms)),
        field("total", format_ms(record.total_ms)),
        reused,
        field("proto", record.protocol or None),
        field("status", record.status or None),
        ("error", error, BAD) if error else ("error", NOT_AVAILABLE, GOOD),
    ]


def format_result_line(record: TimingRecord, error: str | None) -> Text:
    """Render one attempt as a styled, column-aligned line."""
    line = Text()
    for i, (name, value, style) in enumerate(result_fields(record, error)):
        if i:
            line.append(" ")
        line.append(f"{name}=")
        line.append(value.ljust(FIELD_WIDTH), style=style)
    return line


def summary_lines(
    requests: int,
    successful: int,
    failed: int,
    summary: LatencySummary | None,
) -> list[str]:
    """Plain-text lines of the end-of-run summary."""
    lines = ["", f"Requests: {requests} ({successful} successful, {failed} failed)"]
    if summary is None:
        return lines
    lines += [
        "",
        f"Min: {summary.min_ms:.1f}ms",
        f"Max: {summary.max_ms:.1f}ms",
        f"Average: {summary.mean_ms:.1f}ms",
        "",
    ]
    for pct in PERCENTILES:
        if pct in summary.percentiles:
            lines.append(f"{pct}th Percentile: {summary.percentiles[pct]:.1f}ms")
    return lines


@dataclass
class OutputContext:
    """Context for output formatting."""

    console: Console
    json_mode: bool = False
    err_console: Console | None = None
    sequence: int = 0

    def print_json(self, data: dict[str, Any], indent: int | None = None) -> None:
        """Print JSON data."""
        if self.json_mode:
            print(json.dumps(data, indent=indent, default=str), flush=True)

    def result(self, record: TimingRecord, error: str | None) -> None:
        """Print the outcome of one request. Usable as the loop reporter."""
        self.sequence += 1
        if self.json_mode:
            self.print_json({"seq": self.sequence, **record.model_dump(), "error": error})
        else:
            self.console.print(format_result_line(record, error), soft_wrap=True)

    def summary(
        self,
        requests: int,
        successful: int,
        failed: int,
        summary: LatencySummary | None,
    ) -> None:
        """Print the end-of-run summary."""
        if self.json_mode:
            self.print_json(
                {
                    "requests": requests,
                    "successful": successful,
                    "failed": failed,
                    "statistics": summary.model_dump() if summary else None,
                },
                indent=2,
            )
            return
        for line in summary_lines(requests, successful, failed, summary):
            self.console.print(line, highlight=False)

    def error(self, message: str) -> None:
        """Print error in appropriate format."""
        if self.json_mode:
            self.print_json({"error": message})
        else:
            console = self.err_console or self.console
            console.print(f"Error: {message}", style="red", markup=False)
