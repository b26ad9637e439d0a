from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


BLOCKING_SEVERITIES: Tuple[Severity, ...] = (Severity.CRITICAL, Severity.HIGH)

_ALIASES = {"MODERATE": Severity.MEDIUM}


def normalize_severity(value: Any) -> Optional[Severity]:
    """Map a scanner severity string onto the canonical set.

    Matching is case-insensitive. Anything outside CRITICAL/HIGH/MEDIUM/LOW
    (and the npm ``moderate`` alias) returns None and is ignored by callers.
    """
    if value is None:
        return None
    key = str(value).strip().upper()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return Severity(key)
    except ValueError:
        return None


def empty_counts() -> Dict[Severity, int]:
    return {severity: 0 for severity in Severity}


@dataclass(frozen=True)
class Finding:
    source: str
    severity: Severity
    identifier: str

    @property
    def blocking(self) -> bool:
        return self.severity in BLOCKING_SEVERITIES


@dataclass(frozen=True)
class SourceCounts:
    source: str
    counts: Dict[Severity, int] = field(default_factory=empty_counts)
    identifiers: Tuple[str, ...] = ()
    recognized: bool = True
    schema: Optional[str] = None

    @classmethod
    def from_findings(
        cls, source: str, findings: Iterable[Finding], schema: Optional[str] = None
    ) -> "SourceCounts":
        counts = empty_counts()
        identifiers = []
        for finding in findings:
            counts[finding.severity] += 1
            if finding.blocking:
                identifiers.append(finding.identifier)
        return cls(
            source=source,
            counts=counts,
            identifiers=tuple(identifiers),
            schema=schema,
        )

    @classmethod
    def unrecognized(cls, source: str) -> "SourceCounts":
        return cls(source=source, recognized=False)

    @property
    def critical(self) -> int:
        return self.counts.get(Severity.CRITICAL, 0)

    @property
    def high(self) -> int:
        return self.counts.get(Severity.HIGH, 0)


@dataclass(frozen=True)
class SecretCounts:
    count: int = 0
    identifiers: Tuple[str, ...] = ()
