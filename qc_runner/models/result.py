"""Models for test case execution results."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from typing_extensions import TypeAliasType

from qc_runner.errors import CaseFailure, LaunchError

RunStatus = TypeAliasType("RunStatus", Literal["success", "failure", "cancelled"])


@dataclass(frozen=True, kw_only=True)
class RunResult:
    """Outcome of a single case invocation.

    ``error`` explains a failure: a ``LaunchError`` when the process could not
    be started, a ``TimeoutError`` when it ran out of time, or a
    ``CaseFailure`` for a plain non-zero exit.
    """

    case_id: str
    status: RunStatus
    duration: float
    log_path: Path | None = None
    returncode: int | None = None
    error: LaunchError | TimeoutError | CaseFailure | None = None

    @property
    def passed(self) -> bool:
        """Whether the case succeeded."""
        return self.status == "success"


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Reduced view over every result of a run."""

    total: int
    passed: int
    failures: Sequence[RunResult]
    cancelled: Sequence[RunResult] = ()

    @property
    def ok(self) -> bool:
        """Whether every case of the run succeeded."""
        return self.passed == self.total


@dataclass(frozen=True, kw_only=True)
class RunReport:
    """Everything the runner learned during one run."""

    binary: Path
    results_dir: Path
    summary: RunSummary
    elapsed: float
