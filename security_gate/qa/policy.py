from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from security_gate.gate.config import GateConfig
from security_gate.qa.aggregator import AggregateCounts
from security_gate.qa.schemas import GateVerdict


@dataclass(frozen=True)
class Thresholds:
    critical: int = 0
    high: int = 0

    @classmethod
    def from_config(cls, config: GateConfig) -> "Thresholds":
        return cls(critical=config.max_critical, high=config.max_high)


def evaluate_policy(
    aggregate: AggregateCounts,
    thresholds: Thresholds,
    secret_count: int,
    secret_identifiers: Sequence[str] = (),
    unrecognized_sources: Sequence[str] = (),
    fail_on_unrecognized: bool = False,
) -> GateVerdict:
    """Decide PASS/FAIL for one gate run.

    Secrets have zero tolerance regardless of the configured thresholds.
    Unrecognized sources only fail the gate when ``fail_on_unrecognized``
    is set; otherwise they contribute zero findings.
    """
    reasons: List[str] = []
    if aggregate.critical > thresholds.critical:
        reasons.append(
            f"Critical vulnerabilities: {aggregate.critical} found "
            f"(threshold {thresholds.critical})"
        )
    if aggregate.high > thresholds.high:
        reasons.append(
            f"High vulnerabilities: {aggregate.high} found "
            f"(threshold {thresholds.high})"
        )
    if secret_count > 0:
        reasons.append(f"Secrets: {secret_count} secret(s) detected (threshold 0)")
    if fail_on_unrecognized and unrecognized_sources:
        reasons.append(
            "Unrecognized report format: " + ", ".join(unrecognized_sources)
        )

    status = "FAIL" if reasons else "PASS"
    offending: List[str] = []
    if reasons:
        offending = list(aggregate.identifiers) + list(secret_identifiers)
    return GateVerdict(
        status=status,
        reasons=reasons,
        offending_identifiers=offending,
        totals={severity.value: count for severity, count in aggregate.counts.items()},
        secret_count=secret_count,
        thresholds={"CRITICAL": thresholds.critical, "HIGH": thresholds.high},
        unrecognized_sources=list(unrecognized_sources),
    )
