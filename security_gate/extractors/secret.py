from __future__ import annotations

from typing import Any, List

from security_gate.extractors.types import SecretCounts


def _describe(entry: Any, position: int) -> str:
    if not isinstance(entry, dict):
        return f"secret #{position}"
    rule = entry.get("RuleID") or entry.get("Description") or "secret"
    location = entry.get("File")
    if not location:
        return f"{rule} (#{position})"
    line = entry.get("StartLine")
    if line is not None:
        location = f"{location}:{line}"
    return f"{rule} at {location}"


def extract_secrets(document: Any) -> SecretCounts:
    """Count secret findings; a non-list document means no findings.

    Identifiers carry rule and location only, never the matched value.
    """
    if not isinstance(document, list):
        return SecretCounts()
    identifiers: List[str] = [
        _describe(entry, position) for position, entry in enumerate(document, start=1)
    ]
    return SecretCounts(count=len(document), identifiers=tuple(identifiers))
