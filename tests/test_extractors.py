import pytest

from security_gate.errors import UnrecognizedSchema
from security_gate.extractors import (
    ScaSchema,
    Severity,
    detect_sca_schema,
    extract_image,
    extract_sca,
    extract_secrets,
    normalize_severity,
)


def _trivy(*severities, severity_key="Severity"):
    return {
        "Results": [
            {
                "Target": "app:latest",
                "Vulnerabilities": [
                    {
                        "VulnerabilityID": f"CVE-2024-{index}",
                        "PkgName": f"pkg{index}",
                        severity_key: severity,
                    }
                    for index, severity in enumerate(severities)
                ],
            }
        ]
    }


def test_normalize_severity_is_case_insensitive():
    assert normalize_severity("high") is Severity.HIGH
    assert normalize_severity(" Critical ") is Severity.CRITICAL
    assert normalize_severity("moderate") is Severity.MEDIUM
    assert normalize_severity("UNKNOWN") is None
    assert normalize_severity(None) is None


@pytest.mark.parametrize("critical,high", [(0, 0), (1, 0), (3, 7)])
def test_audit_summary_counts_ignore_other_fields(critical, high):
    document = {
        "auditReportVersion": 2,
        "vulnerabilities": {"lodash": {"severity": "critical"}},
        "metadata": {
            "vulnerabilities": {
                "info": 9,
                "low": 2,
                "moderate": 1,
                "high": high,
                "critical": critical,
                "total": 99,
            }
        },
    }
    counts = extract_sca(document)
    assert counts.critical == critical
    assert counts.high == high
    assert counts.counts[Severity.MEDIUM] == 1
    assert counts.counts[Severity.LOW] == 2
    assert counts.schema == ScaSchema.AUDIT_SUMMARY.value
    assert counts.identifiers == ("lodash (critical)",)


def test_dependency_list_counts_and_identifiers():
    document = {
        "dependencies": [
            {
                "fileName": "log4j-core-2.14.jar",
                "vulnerabilities": [
                    {"name": "CVE-2021-44228", "severity": "CRITICAL"},
                    {"name": "CVE-2021-45046", "severity": "high"},
                    {"name": "CVE-2021-0001", "severity": "LOW"},
                ],
            },
            {"name": "requests", "vulns": [{"id": "PYSEC-1", "severity": "High"}]},
            {"name": "clean-lib"},
        ]
    }
    counts = extract_sca(document)
    assert counts.critical == 1
    assert counts.high == 2
    assert counts.counts[Severity.LOW] == 1
    assert counts.identifiers == (
        "CVE-2021-44228 in log4j-core-2.14.jar",
        "CVE-2021-45046 in log4j-core-2.14.jar",
        "PYSEC-1 in requests",
    )


def test_dependency_list_is_detected_before_summary():
    document = {
        "dependencies": [],
        "metadata": {"vulnerabilities": {"critical": 5, "high": 5}},
    }
    assert detect_sca_schema(document) is ScaSchema.DEPENDENCY_LIST
    assert extract_sca(document).critical == 0


def test_bare_dependency_list_is_recognized():
    document = [{"name": "flask", "vulns": [{"id": "GHSA-1", "severity": "critical"}]}]
    assert detect_sca_schema(document) is ScaSchema.DEPENDENCY_LIST
    assert extract_sca(document).identifiers == ("GHSA-1 in flask",)


def test_unrecognized_sca_schema_degrades_to_zero(caplog):
    with pytest.raises(UnrecognizedSchema):
        detect_sca_schema({"runs": []})

    caplog.set_level("WARNING")
    counts = extract_sca({"runs": []})
    assert counts.recognized is False
    assert counts.critical == 0 and counts.high == 0
    assert "Unrecognized SCA report format" in caplog.text


def test_image_counts_match_blocking_records_across_groups():
    document = _trivy("CRITICAL", "HIGH", "MEDIUM", "UNKNOWN")
    document["Results"].append(
        {"Target": "usr/lib", "Vulnerabilities": [{"VulnerabilityID": "CVE-1", "Severity": "High"}]}
    )
    document["Results"].append({"Target": "empty", "Vulnerabilities": None})
    counts = extract_image(document)
    assert counts.critical == 1
    assert counts.high == 2
    assert counts.counts[Severity.MEDIUM] == 1
    assert counts.identifiers == (
        "CVE-2024-0 in pkg0",
        "CVE-2024-1 in pkg1",
        "CVE-1 in OS",
    )


def test_image_lowercase_severity_and_key():
    counts = extract_image(_trivy("high", severity_key="severity"))
    assert counts.high == 1
    assert counts.critical == 0


def test_image_without_results_is_zero():
    assert extract_image({"SchemaVersion": 2}).high == 0
    assert extract_image({"Results": None}).recognized is True


def test_image_non_object_is_unrecognized():
    counts = extract_image(["not", "trivy"])
    assert counts.recognized is False
    assert counts.critical == 0


def test_secret_count_is_list_length():
    secrets = extract_secrets(
        [
            {"RuleID": "aws-access-token", "File": "config.py", "StartLine": 3, "Secret": "AKIA..."},
            {"Description": "Generic API Key"},
        ]
    )
    assert secrets.count == 2
    assert secrets.identifiers == ("aws-access-token at config.py:3", "Generic API Key (#2)")
    assert all("AKIA" not in identifier for identifier in secrets.identifiers)


@pytest.mark.parametrize("document", [{}, {"findings": [1, 2]}, None, "text", 3])
def test_secret_non_list_is_zero(document):
    assert extract_secrets(document).count == 0


def test_audit_summary_identifiers_come_from_package_map():
    document = {
        "vulnerabilities": {
            "lodash": {"name": "lodash", "severity": "critical", "via": ["GHSA-x"]},
            "minimist": {"severity": "high"},
            "debug": {"severity": "low"},
            "broken": "not-an-entry",
        },
        "metadata": {"vulnerabilities": {"critical": 1, "high": 1, "low": 1}},
    }
    counts = extract_sca(document)
    assert (counts.critical, counts.high) == (1, 1)
    assert counts.identifiers == ("lodash (critical)", "minimist (high)")


@pytest.mark.parametrize(
    "value", ["many", float("inf"), 1.5, -1, True, [1], {"n": 1}]
)
def test_malformed_summary_count_is_unrecognized(value, caplog):
    caplog.set_level("WARNING")
    counts = extract_sca({"metadata": {"vulnerabilities": {"critical": value}}})
    assert counts.recognized is False
    assert counts.critical == 0
    assert "summary count 'critical'" in caplog.text


def test_summary_count_accepts_numeric_strings_and_whole_floats():
    counts = extract_sca({"metadata": {"vulnerabilities": {"critical": "2", "high": 3.0}}})
    assert counts.recognized is True
    assert (counts.critical, counts.high) == (2, 3)


def test_image_report_of_another_scanner_is_unrecognized(caplog):
    caplog.set_level("WARNING")
    npm_report = {"metadata": {"vulnerabilities": {"critical": 4}}}
    counts = extract_image(npm_report)
    assert counts.recognized is False
    assert counts.critical == 0
    assert "Unrecognized Image report format" in caplog.text
