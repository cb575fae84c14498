"""
Module: validation.diagnostics

Collects validation diagnostics for a run and builds the summary report
printed by the CLI and optionally saved as JSON.

Structure:
- DiagnosticsCollector: ordered, thread-safe list of Diagnostic
- DiagnosticsReport: counts by kind/severity plus every diagnostic
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from rulebook.core.models import Diagnostic, DiagnosticKind, Severity

logger = logging.getLogger(__name__)


class DiagnosticsCollector:
    """
    Thread-safe collector for diagnostics.

    Diagnostics keep insertion order; nothing is de-duplicated or sorted,
    so the validator controls the order the user sees.
    """

    def __init__(self, diagnostics: Optional[Iterable[Diagnostic]] = None):
        self._diagnostics: List[Diagnostic] = list(diagnostics or [])
        self._lock = threading.Lock()

    def add(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._diagnostics.append(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        with self._lock:
            self._diagnostics.extend(diagnostics)

    def error(self, kind: DiagnosticKind, source: str, message: str, line: Optional[int] = None) -> None:
        """Record an ERROR diagnostic."""
        self.add(Diagnostic.error(kind, source, message, line))

    def warning(self, kind: DiagnosticKind, source: str, message: str, line: Optional[int] = None) -> None:
        """Record a WARNING diagnostic."""
        self.add(Diagnostic.warning(kind, source, message, line))

    @property
    def diagnostics(self) -> List[Diagnostic]:
        with self._lock:
            return list(self._diagnostics)

    @property
    def error_count(self) -> int:
        with self._lock:
            return sum(1 for d in self._diagnostics if d.is_error)

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    def generate_report(self) -> "DiagnosticsReport":
        return DiagnosticsReport.from_diagnostics(self.diagnostics)


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    """True if any diagnostic has ERROR severity."""
    return any(d.is_error for d in diagnostics)


@dataclass
class DiagnosticsReport:
    """Complete diagnostics report for one run."""
    total: int
    error_count: int
    warning_count: int
    summary_by_kind: Dict[str, int]
    diagnostics: List[Diagnostic]
    timings: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_diagnostics(
        cls,
        diagnostics: List[Diagnostic],
        timings: Optional[Dict[str, float]] = None,
    ) -> "DiagnosticsReport":
        summary_by_kind: Dict[str, int] = {}
        for diagnostic in diagnostics:
            key = diagnostic.kind.value
            summary_by_kind[key] = summary_by_kind.get(key, 0) + 1

        errors = sum(1 for d in diagnostics if d.severity == Severity.ERROR)
        return cls(
            total=len(diagnostics),
            error_count=errors,
            warning_count=len(diagnostics) - errors,
            summary_by_kind=summary_by_kind,
            diagnostics=list(diagnostics),
            timings=dict(timings or {}),
        )

    @property
    def passed(self) -> bool:
        return self.error_count == 0

    def summary(self) -> str:
        """One-line summary, e.g. '2 errors, 1 warning'."""
        errors = f"{self.error_count} error{'s' if self.error_count != 1 else ''}"
        warnings = f"{self.warning_count} warning{'s' if self.warning_count != 1 else ''}"
        return f"{errors}, {warnings}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "total": self.total,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "summary_by_kind": dict(sorted(self.summary_by_kind.items())),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "timings": dict(self.timings),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json() + "\n", encoding="utf-8")
        logger.info(f"Diagnostics report saved: {path}")
