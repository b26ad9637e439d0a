from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from security_gate.errors import ConfigError

CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "security_gate.yml"

DEFAULT_SCA_REPORT = "reports/sca/npm-audit-report.json"
DEFAULT_SCA_FALLBACK = "reports/sca/dependency-check-report.json"
DEFAULT_IMAGE_REPORT = "reports/image/trivy-image.json"
DEFAULT_SECRET_REPORT = "reports/secret/gitleaks-report.json"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class ReportPaths:
    sca: Path
    sca_fallback: Optional[Path]
    image: Path
    secret: Path


@dataclass(frozen=True)
class GateConfig:
    reports: ReportPaths
    max_critical: int = 0
    max_high: int = 0
    fail_on_unrecognized_schema: bool = False
    sca_override: bool = False
    image_override: bool = False
    secret_override: bool = False

    def with_overrides(
        self,
        sca: Optional[str] = None,
        image: Optional[str] = None,
        secret: Optional[str] = None,
        max_critical: Optional[int] = None,
        max_high: Optional[int] = None,
    ) -> "GateConfig":
        config = self
        if sca:
            config = replace(
                config, reports=replace(config.reports, sca=Path(sca)), sca_override=True
            )
        if image:
            config = replace(
                config,
                reports=replace(config.reports, image=Path(image)),
                image_override=True,
            )
        if secret:
            config = replace(
                config,
                reports=replace(config.reports, secret=Path(secret)),
                secret_override=True,
            )
        if max_critical is not None:
            config = replace(config, max_critical=_as_threshold("max_critical", max_critical))
        if max_high is not None:
            config = replace(config, max_high=_as_threshold("max_high", max_high))
        return config


def _as_threshold(name: str, value: Any) -> int:
    try:
        parsed = int(str(value).strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < 0:
        raise ConfigError(f"{name} must be >= 0, got {parsed}")
    return parsed


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _read_yaml(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid gate config {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Gate config {path} must be a mapping")
    return data


def _section(data: Mapping[str, Any], key: str, path: Path) -> Mapping[str, Any]:
    section = data.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"Gate config {path}: '{key}' must be a mapping")
    return section


def get_gate_config(
    environ: Optional[Mapping[str, str]] = None, path: Optional[Path] = None
) -> GateConfig:
    """Build the gate configuration once for a run.

    Defaults are overlaid by the YAML file, then by environment variables.
    ``environ`` defaults to ``os.environ``; callers that want ``.env``
    support load it before calling.
    """
    env = os.environ if environ is None else environ
    if path is None:
        path = Path(env["SECURITY_GATE_CONFIG"]) if env.get("SECURITY_GATE_CONFIG") else CONFIG_PATH
    data = _read_yaml(path)
    reports = _section(data, "reports", path)
    thresholds = _section(data, "thresholds", path)

    fallback = env.get("SCA_REPORT_FALLBACK") or reports.get("sca_fallback", DEFAULT_SCA_FALLBACK)
    report_paths = ReportPaths(
        sca=Path(env.get("SCA_REPORT") or reports.get("sca", DEFAULT_SCA_REPORT)),
        sca_fallback=Path(fallback) if fallback else None,
        image=Path(env.get("IMAGE_REPORT") or reports.get("image", DEFAULT_IMAGE_REPORT)),
        secret=Path(env.get("SECRET_REPORT") or reports.get("secret", DEFAULT_SECRET_REPORT)),
    )
    return GateConfig(
        reports=report_paths,
        max_critical=_as_threshold(
            "GATE_MAX_CRITICAL",
            env.get("GATE_MAX_CRITICAL") or thresholds.get("critical", 0),
        ),
        max_high=_as_threshold(
            "GATE_MAX_HIGH", env.get("GATE_MAX_HIGH") or thresholds.get("high", 0)
        ),
        fail_on_unrecognized_schema=_as_bool(
            "GATE_FAIL_ON_UNRECOGNIZED_SCHEMA",
            env.get("GATE_FAIL_ON_UNRECOGNIZED_SCHEMA")
            or data.get("fail_on_unrecognized_schema", False),
        ),
        sca_override=bool(env.get("SCA_REPORT")),
        image_override=bool(env.get("IMAGE_REPORT")),
        secret_override=bool(env.get("SECRET_REPORT")),
    )
