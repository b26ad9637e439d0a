from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from security_gate.extractors.types import Severity, SourceCounts, empty_counts


@dataclass(frozen=True)
class AggregateCounts:
    counts: Dict[Severity, int] = field(default_factory=empty_counts)
    identifiers: Tuple[str, ...] = ()

    @property
    def critical(self) -> int:
        return self.counts.get(Severity.CRITICAL, 0)

    @property
    def high(self) -> int:
        return self.counts.get(Severity.HIGH, 0)


def aggregate_counts(sources: Iterable[SourceCounts]) -> AggregateCounts:
    totals = empty_counts()
    identifiers: List[str] = []
    for source in sources:
        for severity, count in source.counts.items():
            totals[severity] = totals.get(severity, 0) + count
        identifiers.extend(source.identifiers)
    return AggregateCounts(counts=totals, identifiers=tuple(identifiers))
