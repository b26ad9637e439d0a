from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Dict, Iterator, List

from security_gate.errors import UnrecognizedSchema
from security_gate.extractors.types import (
    BLOCKING_SEVERITIES,
    Finding,
    Severity,
    SourceCounts,
    empty_counts,
    normalize_severity,
)

logger = logging.getLogger(__name__)

SOURCE = "SCA"


class ScaSchema(str, Enum):
    DEPENDENCY_LIST = "dependency_list"
    AUDIT_SUMMARY = "audit_summary"


def _dependency_records(document: Any) -> List[Dict[str, Any]]:
    if isinstance(document, dict):
        records = document.get("dependencies")
    else:
        records = document
    if not isinstance(records, list):
        return []
    return [record for record in records if isinstance(record, dict)]


def _is_dependency_list(document: Any) -> bool:
    if isinstance(document, dict):
        return isinstance(document.get("dependencies"), list)
    if isinstance(document, list):
        return bool(document) and all(isinstance(item, dict) for item in document)
    return False


def _summary_block(document: Any) -> Any:
    if not isinstance(document, dict):
        return None
    metadata = document.get("metadata")
    if not isinstance(metadata, dict):
        return None
    return metadata.get("vulnerabilities")


def detect_sca_schema(document: Any) -> ScaSchema:
    """Dependency-list shape is checked before the audit-summary shape."""
    if _is_dependency_list(document):
        return ScaSchema.DEPENDENCY_LIST
    if isinstance(_summary_block(document), dict):
        return ScaSchema.AUDIT_SUMMARY
    raise UnrecognizedSchema(
        SOURCE,
        "expected a 'dependencies' list or a 'metadata.vulnerabilities' summary",
    )


def _dependency_name(record: Dict[str, Any]) -> str:
    for key in ("name", "packageName", "fileName"):
        value = record.get(key)
        if value:
            return str(value)
    return "unknown"


def _vulnerability_id(vuln: Dict[str, Any]) -> str:
    for key in ("id", "name", "source"):
        value = vuln.get(key)
        if value:
            return str(value)
    return "UNKNOWN"


def _iter_dependency_findings(document: Any) -> Iterator[Finding]:
    for record in _dependency_records(document):
        vulns = record.get("vulnerabilities")
        if vulns is None:
            vulns = record.get("vulns")
        if not isinstance(vulns, list):
            continue
        dependency = _dependency_name(record)
        for vuln in vulns:
            if not isinstance(vuln, dict):
                continue
            severity = normalize_severity(vuln.get("severity"))
            if severity is None:
                continue
            yield Finding(
                source=SOURCE,
                severity=severity,
                identifier=f"{_vulnerability_id(vuln)} in {dependency}",
            )


def _count(key: str, value: Any) -> int:
    """Parse a summary total; anything but a non-negative whole number is malformed."""
    if value is None:
        return 0
    if isinstance(value, bool):
        raise UnrecognizedSchema(
            SOURCE, f"summary count {key!r} is not a number: {value!r}"
        )
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise UnrecognizedSchema(
                SOURCE, f"summary count {key!r} is not a whole number: {value!r}"
            )
        value = int(value)
    if isinstance(value, str) and value.strip().isdecimal():
        value = int(value.strip())
    if not isinstance(value, int) or value < 0:
        raise UnrecognizedSchema(
            SOURCE, f"summary count {key!r} is not a non-negative integer: {value!r}"
        )
    return value


def _summary_identifiers(document: Dict[str, Any]) -> List[str]:
    """Blocking package entries from the npm audit ``vulnerabilities`` map."""
    packages = document.get("vulnerabilities")
    if not isinstance(packages, dict):
        return []
    identifiers = []
    for package, entry in packages.items():
        if not isinstance(entry, dict):
            continue
        severity = normalize_severity(entry.get("severity"))
        if severity in BLOCKING_SEVERITIES:
            identifiers.append(f"{package} ({severity.value.lower()})")
    return identifiers


def _summary_counts(document: Any) -> SourceCounts:
    summary = _summary_block(document)
    counts = empty_counts()
    counts[Severity.CRITICAL] = _count("critical", summary.get("critical"))
    counts[Severity.HIGH] = _count("high", summary.get("high"))
    counts[Severity.MEDIUM] = _count(
        "moderate", summary.get("moderate", summary.get("medium"))
    )
    counts[Severity.LOW] = _count("low", summary.get("low"))
    return SourceCounts(
        source=SOURCE,
        counts=counts,
        identifiers=tuple(_summary_identifiers(document)),
        schema=ScaSchema.AUDIT_SUMMARY.value,
    )


def extract_sca(document: Any) -> SourceCounts:
    try:
        schema = detect_sca_schema(document)
        if schema is ScaSchema.DEPENDENCY_LIST:
            result = SourceCounts.from_findings(
                SOURCE, _iter_dependency_findings(document), schema=schema.value
            )
        else:
            result = _summary_counts(document)
    except UnrecognizedSchema as exc:
        logger.warning("%s; counting zero findings from this source", exc)
        return SourceCounts.unrecognized(SOURCE)
    logger.debug(
        "SCA schema=%s critical=%s high=%s", schema.value, result.critical, result.high
    )
    return result
