from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from security_gate.extractors.types import Severity
from security_gate.gate.runner import GateResult

BANNER = "-" * 57


def _source_lines(result: GateResult) -> List[str]:
    lines = []
    for source in result.sources:
        line = (
            f"{source.source} vulnerabilities: critical={source.critical}, "
            f"high={source.high}"
        )
        if not source.recognized:
            line += " (unrecognized report format)"
        lines.append(line)
    lines.append(f"Secrets detected: {result.secrets.count}")
    return lines


def _notes(result: GateResult) -> List[str]:
    notes = [f"note: {identifier}" for identifier in result.aggregate.identifiers]
    medium = result.aggregate.counts.get(Severity.MEDIUM, 0)
    low = result.aggregate.counts.get(Severity.LOW, 0)
    if medium or low:
        notes.append(f"note: non-blocking findings medium={medium}, low={low}")
    return notes


def print_summary(
    result: GateResult,
    show_notes: bool = False,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> None:
    out = out or sys.stdout
    err = err or sys.stderr
    for line in _source_lines(result):
        print(line, file=out)

    verdict = result.verdict
    if verdict.passed:
        print(
            "Security gate passed. Findings are within policy "
            f"(critical<={result.thresholds.critical}, "
            f"high<={result.thresholds.high}, secrets=0).",
            file=out,
        )
        if show_notes:
            for note in _notes(result):
                print(note, file=out)
        return

    print(BANNER, file=err)
    print("SECURITY GATE FAILED", file=err)
    for reason in verdict.reasons:
        print(f"Reason: {reason}", file=err)
    print(
        f"Summary: Critical={result.aggregate.critical}, "
        f"High={result.aggregate.high}, Secrets={result.secrets.count}",
        file=err,
    )
    if verdict.offending_identifiers:
        print("Offending findings:", file=err)
        for identifier in verdict.offending_identifiers:
            print(f"  - {identifier}", file=err)
    print(BANNER, file=err)
