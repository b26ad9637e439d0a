from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Literal

from pydantic import BaseModel, Field


class ExitCode(IntEnum):
    PASS = 0
    POLICY_FAILURE = 1
    EXECUTION_ERROR = 2


class GateVerdict(BaseModel):
    status: Literal["PASS", "FAIL"]
    reasons: List[str] = Field(default_factory=list)
    offending_identifiers: List[str] = Field(default_factory=list)
    totals: Dict[str, int] = Field(default_factory=dict)
    secret_count: int = Field(default=0, ge=0)
    thresholds: Dict[str, int] = Field(default_factory=dict)
    unrecognized_sources: List[str] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status == "PASS"

    @property
    def exit_code(self) -> ExitCode:
        return ExitCode.PASS if self.passed else ExitCode.POLICY_FAILURE
