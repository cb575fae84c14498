"""
Module: compiler.timing

Purpose:
    Phase timing for compiler runs (parse, validate, assemble, extract).
    Durations are logged at debug level and included in the diagnostics
    report when one is requested.

Key Classes:
    - TimingLog: Collects per-phase durations

Key Functions:
    - timed_phase: Context manager for timing code blocks

Used By:
    - compiler.pipeline
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Generator, List, Tuple

logger = logging.getLogger(__name__)


@dataclass
class TimingLog:
    """
    Timing metrics for one compiler run.

    Attributes:
        phase_timings: Dict of phase_name -> duration_seconds, in the
            order phases finished

    Example:
        >>> log = TimingLog()
        >>> log.log_phase("parse", 0.034)
        >>> print(log.summary())
    """
    phase_timings: Dict[str, float] = field(default_factory=dict)

    def log_phase(self, phase: str, duration: float) -> None:
        """Record a phase duration; repeated phases accumulate."""
        self.phase_timings[phase] = self.phase_timings.get(phase, 0.0) + duration

    @property
    def total(self) -> float:
        return sum(self.phase_timings.values())

    def slowest(self) -> List[Tuple[str, float]]:
        return sorted(self.phase_timings.items(), key=lambda x: -x[1])

    def summary(self) -> str:
        """Generate human-readable timing summary."""
        lines = ["=== Compile Timing Summary ==="]
        for phase, duration in self.phase_timings.items():
            lines.append(f"  {phase:12s} {duration:.3f}s")
        lines.append(f"  {'total':12s} {self.total:.3f}s")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, float]:
        return {phase: round(duration, 6) for phase, duration in self.phase_timings.items()}


@contextmanager
def timed_phase(log: TimingLog, phase: str) -> Generator[None, None, None]:
    """
    Context manager for timing a pipeline phase.

    Example:
        >>> log = TimingLog()
        >>> with timed_phase(log, "parse"):
        ...     result = load_rules(rules_dir)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        log.log_phase(phase, elapsed)
        logger.debug(f"Phase {phase} took {elapsed:.3f}s")
