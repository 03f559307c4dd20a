from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

from teststar.learning.models import Report


class ReportJsonlStore:
    """JSONL persistence for the report history, one report per line in creation order."""

    def __init__(self, path: Path):
        """Ensure the backing directory exists and record the JSONL filepath."""
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> List[Report]:
        """Read all stored reports from disk and reconstruct them as models."""
        if not self.path.exists():
            return []
        reports: List[Report] = []
        with self.path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if not line.strip():
                    continue
                reports.append(Report.model_validate(json.loads(line)))
        return reports

    def get(self, report_id: str) -> Optional[Report]:
        return next((report for report in self.load() if report.id == report_id), None)

    def append(self, report: Report) -> None:
        """Add a report at the end of the history, replacing any report with the same ID."""
        existing = [stored for stored in self.load() if stored.id != report.id]
        existing.append(report)
        self._write(existing)

    def delete(self, report_ids: Iterable[str]) -> int:
        """Remove reports with the provided IDs and return how many were dropped."""
        to_delete = set(report_ids)
        reports = self.load()
        remaining = [report for report in reports if report.id not in to_delete]
        removed = len(reports) - len(remaining)
        if removed:
            self._write(remaining)
        return removed

    def _write(self, reports: Iterable[Report]) -> None:
        with self.path.open("w", encoding="utf-8") as handle:
            for report in reports:
                handle.write(report.model_dump_json())
                handle.write("\n")
