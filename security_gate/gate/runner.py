from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from security_gate.extractors import (
    SecretCounts,
    SourceCounts,
    extract_image,
    extract_sca,
    extract_secrets,
)
from security_gate.gate.config import GateConfig
from security_gate.loaders.report_loader import IMAGE, SCA, SECRET, load_reports
from security_gate.qa.aggregator import AggregateCounts, aggregate_counts
from security_gate.qa.policy import Thresholds, evaluate_policy
from security_gate.qa.schemas import GateVerdict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateResult:
    sources: List[SourceCounts]
    secrets: SecretCounts
    aggregate: AggregateCounts
    thresholds: Thresholds
    verdict: GateVerdict


def run_gate(config: GateConfig) -> GateResult:
    """Load the three reports, normalize them and evaluate the policy.

    Raises ReportNotFound / ReportParseError when a report cannot be read.
    """
    reports = load_reports(config)
    sources = [
        extract_sca(reports[SCA].document),
        extract_image(reports[IMAGE].document),
    ]
    secrets = extract_secrets(reports[SECRET].document)
    aggregate = aggregate_counts(sources)
    thresholds = Thresholds.from_config(config)
    unrecognized = [source.source for source in sources if not source.recognized]
    verdict = evaluate_policy(
        aggregate,
        thresholds,
        secrets.count,
        secret_identifiers=secrets.identifiers,
        unrecognized_sources=unrecognized,
        fail_on_unrecognized=config.fail_on_unrecognized_schema,
    )
    logger.info(
        "Security gate verdict status=%s critical=%s high=%s secrets=%s",
        verdict.status,
        aggregate.critical,
        aggregate.high,
        secrets.count,
    )
    return GateResult(
        sources=sources,
        secrets=secrets,
        aggregate=aggregate,
        thresholds=thresholds,
        verdict=verdict,
    )
