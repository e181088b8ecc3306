"""
Module: discovery.timing

Purpose:
    Timing instrumentation for the discovery scan, to find which phase or
    page dominates on large documents.

Key Classes:
    - TimingLog: Collects scan-level and per-page timing metrics

Key Functions:
    - timed_phase: Context manager for timing code blocks

Dependencies:
    - time (std)
    - contextlib (std)
    - dataclasses (std)

Used By:
    - discovery.pipeline: Scan orchestrator
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class TimingLog:
    """
    Timing metrics for a discovery scan.

    Attributes:
        phase_timings: Dict of phase_name -> duration_seconds
        page_timings: Dict of page_name -> {phase_name -> duration_seconds}

    Example:
        >>> log = TimingLog()
        >>> log.log_phase("masters", 0.234)
        >>> log.log_page("Page 1", "unresolved", 0.012)
        >>> print(log.summary())
    """
    phase_timings: Dict[str, float] = field(default_factory=dict)
    page_timings: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def log_phase(self, phase: str, duration: float) -> None:
        self.phase_timings[phase] = duration

    def log_page(self, page: str, phase: str, duration: float) -> None:
        """Accumulates: a page visited twice in one phase sums its time."""
        phases = self.page_timings.setdefault(page, {})
        phases[phase] = phases.get(phase, 0.0) + duration

    def get_page_total(self, page: str) -> float:
        return sum(self.page_timings.get(page, {}).values())

    def get_slowest_pages(self, n: int = 3) -> List[tuple]:
        """Get the N slowest pages with their total time and slowest phase."""
        results = []
        for page, phases in self.page_timings.items():
            if not phases:
                continue
            slowest_phase = max(phases.items(), key=lambda x: x[1])
            results.append((page, sum(phases.values()), slowest_phase[0], slowest_phase[1]))
        results.sort(key=lambda x: x[1], reverse=True)
        return results[:n]

    def summary(self) -> str:
        """Generate human-readable timing summary."""
        lines = ["", "=== Discovery Timing Summary ==="]

        if self.phase_timings:
            lines.append("Phases:")
            for phase, duration in self.phase_timings.items():
                lines.append(f"  {phase:25s} {duration:.3f}s")

        slowest = self.get_slowest_pages(3)
        if slowest:
            lines.append("")
            lines.append("Slowest pages:")
            for page, total, slow_phase, slow_duration in slowest:
                lines.append(f"  {page}: {total:.3f}s ({slow_phase}: {slow_duration:.3f}s)")

        lines.append("")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase_timings": self.phase_timings,
            "page_timings": self.page_timings,
            "slowest_pages": [
                {"page": page, "total": total, "slowest_phase": phase, "phase_duration": dur}
                for page, total, phase, dur in self.get_slowest_pages(5)
            ],
        }

    def save(self, path: Path, merge: bool = True) -> None:
        """
        Save timing data to JSON file.

        When merge=True (default) the file is locked and existing page
        timings from other scans are kept.
        """
        if not merge:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
            logger.debug(f"Saved timing data to {path}")
            return

        from icon_toolkit.common.file_locking import locked_read_modify_write_json

        def merge_timing_data(existing: Dict[str, Any]) -> Dict[str, Any]:
            existing.setdefault("phase_timings", {}).update(self.phase_timings)
            existing.setdefault("page_timings", {}).update(self.page_timings)
            merged = TimingLog(existing["phase_timings"], existing["page_timings"])
            existing["slowest_pages"] = merged.to_dict()["slowest_pages"]
            return existing

        locked_read_modify_write_json(
            path,
            merge_timing_data,
            default=lambda: {"phase_timings": {}, "page_timings": {}},
        )
        logger.debug(f"Merged timing data to {path}")


@contextmanager
def timed_phase(
    log: TimingLog,
    phase: str,
    page: Optional[str] = None,
) -> Generator[None, None, None]:
    """
    Context manager for timing a code phase.

    Args:
        log: TimingLog instance to record metrics
        phase: Name of the phase being timed
        page: If provided, records as a per-page metric;
              otherwise records as a scan-level metric

    Example:
        >>> log = TimingLog()
        >>> with timed_phase(log, "masters"):
        ...     collect_masters(doc)
        >>> with timed_phase(log, "unresolved", page="Page 1"):
        ...     collect_unresolved(doc, page)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if page:
            log.log_page(page, phase, elapsed)
        else:
            log.log_phase(phase, elapsed)
