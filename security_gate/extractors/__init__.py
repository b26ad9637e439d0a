"""Scanner report extractors."""

from security_gate.extractors.image import extract_image
from security_gate.extractors.sca import ScaSchema, detect_sca_schema, extract_sca
from security_gate.extractors.secret import extract_secrets
from security_gate.extractors.types import (
    BLOCKING_SEVERITIES,
    Finding,
    SecretCounts,
    Severity,
    SourceCounts,
    normalize_severity,
)

__all__ = [
    "BLOCKING_SEVERITIES",
    "Finding",
    "ScaSchema",
    "SecretCounts",
    "Severity",
    "SourceCounts",
    "detect_sca_schema",
    "extract_image",
    "extract_sca",
    "extract_secrets",
    "normalize_severity",
]
