"""Change, test and visual-stability history for structural-failure analysis.

All timestamps are Unix seconds. Derived stability metrics are computed on
demand from the raw records and never cached on the objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ModificationRecord:
    """One historical change to a file."""

    timestamp: int
    description: str
    author: str = ""
    change_kind: str = "modify"  # add, modify, delete, rename


@dataclass(frozen=True)
class TestRun:
    """One pass/fail result of a named test."""

    __test__ = False  # keep pytest from collecting this class

    test_name: str
    passed: bool
    timestamp: int
    file: Optional[str] = None


@dataclass(frozen=True)
class VisualSample:
    """One visual-stability observation (True when the render matched baseline)."""

    component: str
    stable: bool
    timestamp: int
    file: Optional[str] = None


@dataclass(frozen=True)
class StabilityMetrics:
    """Derived stability figures for one file.

    Attributes:
        modification_frequency: Modifications inside the monitoring window.
        average_change_interval: Mean seconds between consecutive changes
            (0.0 with fewer than two changes).
        test_stability: Pass ratio of the file's tests (1.0 without tests).
        visual_stability: Stable ratio of the file's visual samples
            (1.0 without samples).
    """

    modification_frequency: float
    average_change_interval: float
    test_stability: float
    visual_stability: float


@dataclass(frozen=True)
class FileHistory:
    """All modification records for one path."""

    path: str
    records: tuple[ModificationRecord, ...] = ()

    def sorted_records(self) -> list[ModificationRecord]:
        return sorted(self.records, key=lambda r: (r.timestamp, r.description))

    def records_within(self, window_start: int, window_end: int) -> list[ModificationRecord]:
        """Records with ``window_start <= timestamp <= window_end``, oldest first."""
        return [r for r in self.sorted_records() if window_start <= r.timestamp <= window_end]

    def metrics(
        self,
        reference_time: int,
        window_seconds: int,
        tests: tuple[TestRun, ...] = (),
        visuals: tuple[VisualSample, ...] = (),
    ) -> StabilityMetrics:
        """Compute stability metrics as of ``reference_time``."""
        in_window = self.records_within(reference_time - window_seconds, reference_time)

        ordered = self.sorted_records()
        if len(ordered) >= 2:
            gaps = [b.timestamp - a.timestamp for a, b in zip(ordered, ordered[1:])]
            interval = sum(gaps) / len(gaps)
        else:
            interval = 0.0

        own_tests = [t for t in tests if t.file == self.path]
        test_stability = (
            sum(1 for t in own_tests if t.passed) / len(own_tests) if own_tests else 1.0
        )
        own_visuals = [v for v in visuals if v.file == self.path]
        visual_stability = (
            sum(1 for v in own_visuals if v.stable) / len(own_visuals) if own_visuals else 1.0
        )

        return StabilityMetrics(
            modification_frequency=float(len(in_window)),
            average_change_interval=float(interval),
            test_stability=test_stability,
            visual_stability=visual_stability,
        )


@dataclass(frozen=True)
class ProjectHistory:
    """History input for one analysis run."""

    files: tuple[FileHistory, ...] = ()
    tests: tuple[TestRun, ...] = ()
    visuals: tuple[VisualSample, ...] = ()

    def for_path(self, path: str) -> Optional[FileHistory]:
        for history in self.files:
            if history.path == path:
                return history
        return None

    def latest_timestamp(self) -> Optional[int]:
        stamps = [r.timestamp for h in self.files for r in h.records]
        stamps.extend(t.timestamp for t in self.tests)
        stamps.extend(v.timestamp for v in self.visuals)
        return max(stamps) if stamps else None


EMPTY_HISTORY = ProjectHistory()
