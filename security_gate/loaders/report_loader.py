from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from security_gate.errors import ReportNotFound, ReportParseError, ReportReadError
from security_gate.gate.config import GateConfig

logger = logging.getLogger(__name__)

SCA = "sca"
IMAGE = "image"
SECRET = "secret"
REPORT_NAMES = (SCA, IMAGE, SECRET)


@dataclass(frozen=True)
class LoadedReport:
    name: str
    path: Path
    document: Any
    used_fallback: bool = False


def _candidates(name: str, config: GateConfig) -> List[Path]:
    reports = config.reports
    if name == SCA:
        if config.sca_override or reports.sca_fallback is None:
            return [reports.sca]
        return [reports.sca, reports.sca_fallback]
    if name == IMAGE:
        return [reports.image]
    if name == SECRET:
        return [reports.secret]
    raise ValueError(f"Unknown report name: {name}")


def resolve_report_path(name: str, config: GateConfig) -> Path:
    candidates = _candidates(name, config)
    for index, candidate in enumerate(candidates):
        if candidate.is_file():
            if index > 0:
                logger.warning(
                    "Primary %s report %s not found, using fallback %s",
                    name,
                    candidates[0],
                    candidate,
                )
            logger.info("Using %s report: %s", name, candidate)
            return candidate
    raise ReportNotFound(name, candidates)


def load_report(name: str, config: GateConfig) -> LoadedReport:
    path = resolve_report_path(name, config)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ReportParseError(name, path, str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise ReportParseError(name, path, f"not UTF-8 text ({exc.reason})") from exc
    except OSError as exc:
        raise ReportReadError(name, path, exc.strerror or str(exc)) from exc
    return LoadedReport(
        name=name,
        path=path,
        document=document,
        used_fallback=path != _candidates(name, config)[0],
    )


def load_reports(config: GateConfig) -> Dict[str, LoadedReport]:
    return {name: load_report(name, config) for name in REPORT_NAMES}
