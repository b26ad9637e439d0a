from __future__ import annotations

from pathlib import Path
from typing import Sequence


class GateError(Exception):
    """Base class for security gate errors."""


class ConfigError(GateError):
    pass


class ReportNotFound(GateError):
    def __init__(self, report: str, attempted: Sequence[Path]) -> None:
        self.report = report
        self.attempted = list(attempted)
        paths = ", ".join(str(p) for p in self.attempted) or "<none>"
        super().__init__(f"Required {report} report not found (tried: {paths})")


class ReportParseError(GateError):
    def __init__(self, report: str, path: Path, detail: str) -> None:
        self.report = report
        self.path = path
        super().__init__(f"Invalid JSON in {report} report {path}: {detail}")


class UnrecognizedSchema(GateError):
    def __init__(self, source: str, detail: str) -> None:
        self.source = source
        super().__init__(f"Unrecognized {source} report format: {detail}")


class ReportReadError(GateError):
    def __init__(self, report: str, path: Path, detail: str) -> None:
        self.report = report
        self.path = path
        super().__init__(f"Cannot read {report} report {path}: {detail}")
