"""Verification check types."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class CheckStatus(Enum):
    """Status of a verification check."""

    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"
    INFO = "info"
    SKIP = "skip"


class FailureKind(Enum):
    """Why a check did not pass."""

    MISSING_ARTIFACT = "missing_artifact"
    WRONG_ARCHITECTURE = "wrong_architecture"
    MISSING_REQUIRED_DEPENDENCY = "missing_required_dependency"
    MISSING_REQUIRED_FEATURE = "missing_required_feature"
    TOOL_UNAVAILABLE = "tool_unavailable"


@dataclass(frozen=True)
class CheckResult:
    """Result of a single verification check."""

    name: str
    status: CheckStatus
    message: str = ""
    remediation: str | None = None
    kind: FailureKind | None = None
    details: tuple[str, ...] = ()

    @property
    def failed(self) -> bool:
        return self.status == CheckStatus.FAIL


@dataclass(frozen=True)
class CheckStep:
    """An ordered unit of verification.

    A critical step stops the run when any of its results fail. When
    ``requires`` names a context attribute that is still unset, the step is
    skipped instead of run.
    """

    name: str
    run: Callable[[Any], list[CheckResult]]
    critical: bool = False
    requires: str | None = None


@dataclass(frozen=True)
class VerifyReport:
    """Outcome of a full verification run."""

    results: tuple[CheckResult, ...]
    aborted_step: str | None = None

    @property
    def passed(self) -> bool:
        return not any(r.failed for r in self.results)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def count(self, status: CheckStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    def failures(self) -> list[CheckResult]:
        return [r for r in self.results if r.failed]
