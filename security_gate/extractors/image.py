from __future__ import annotations

import logging
from typing import Any, Iterator

from security_gate.errors import UnrecognizedSchema
from security_gate.extractors.types import Finding, SourceCounts, normalize_severity

logger = logging.getLogger(__name__)

SOURCE = "Image"
SCHEMA = "results"

_TRIVY_MARKERS = frozenset({"SchemaVersion", "ArtifactName", "ArtifactType"})


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _severity_field(vuln: dict) -> Any:
    if "Severity" in vuln:
        return vuln["Severity"]
    return vuln.get("severity")


def _iter_findings(document: dict) -> Iterator[Finding]:
    for result in _as_list(document.get("Results")):
        if not isinstance(result, dict):
            continue
        for vuln in _as_list(result.get("Vulnerabilities")):
            if not isinstance(vuln, dict):
                continue
            severity = normalize_severity(_severity_field(vuln))
            if severity is None:
                continue
            vuln_id = vuln.get("VulnerabilityID") or "UNKNOWN"
            package = vuln.get("PkgName") or "OS"
            yield Finding(
                source=SOURCE, severity=severity, identifier=f"{vuln_id} in {package}"
            )


def _check_schema(document: Any) -> None:
    """A Trivy report is an object with ``Results``; clean scans may carry only metadata."""
    if not isinstance(document, dict):
        raise UnrecognizedSchema(SOURCE, "expected an object with a 'Results' list")
    if "Results" in document or _TRIVY_MARKERS.intersection(document):
        return
    raise UnrecognizedSchema(SOURCE, "no 'Results' key and no Trivy report metadata")


def extract_image(document: Any) -> SourceCounts:
    try:
        _check_schema(document)
    except UnrecognizedSchema as exc:
        logger.warning("%s; counting zero findings from this source", exc)
        return SourceCounts.unrecognized(SOURCE)
    result = SourceCounts.from_findings(SOURCE, _iter_findings(document), schema=SCHEMA)
    logger.debug("Image critical=%s high=%s", result.critical, result.high)
    return result
