"""Check runners: subprocess-backed single checks and the ordered step loop."""

import subprocess
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from .tools import ToolUnavailable
from .types import CheckResult, CheckStatus, CheckStep, FailureKind, VerifyReport


def run_check(
    name: str,
    command: Sequence[str],
    check_fn: Callable[[str], bool] | None = None,
    pass_msg: str = "",
    fail_msg: str = "",
    remediation: str | None = None,
    kind: FailureKind | None = None,
    env: Mapping[str, str] | None = None,
) -> CheckResult:
    """Run a verification check via subprocess.

    Args:
        name: Display name for the check
        command: Command and arguments to execute
        check_fn: Function to evaluate stdout (None = info only)
        pass_msg: Message on pass ("{result}" = use command output)
        fail_msg: Message on fail ("{result}" = use command output)
        remediation: Command/action to fix a failure
        kind: Failure category reported on fail
        env: Environment for the command (None = inherit)

    Returns:
        CheckResult with check outcome

    Raises:
        ToolUnavailable: The command could not be started
    """
    try:
        result = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            env=dict(env) if env is not None else None,
        )
    except FileNotFoundError as exc:
        raise ToolUnavailable(command[0]) from exc
    output = result.stdout.strip()

    if check_fn is None:
        return CheckResult(name=name, status=CheckStatus.INFO, message=output)

    passed = result.returncode == 0 and check_fn(output)

    if passed:
        msg = pass_msg.replace("{result}", output) if pass_msg else ""
    else:
        msg = fail_msg.replace("{result}", output) if fail_msg else ""

    return CheckResult(
        name=name,
        status=CheckStatus.PASS if passed else CheckStatus.FAIL,
        message=msg,
        remediation=remediation if not passed else None,
        kind=kind if not passed else None,
    )


def run_steps(steps: Sequence[CheckStep], context: Any) -> VerifyReport:
    """Run steps in order, stopping after the first critical step that fails."""
    results: list[CheckResult] = []

    for step in steps:
        if step.requires and getattr(context, step.requires, None) is None:
            missing = step.requires.replace("_", " ")
            results.append(
                CheckResult(step.name, CheckStatus.SKIP, f"Skipped: no {missing}")
            )
            continue

        step_results = step.run(context)
        results.extend(step_results)

        if step.critical and any(r.failed for r in step_results):
            return VerifyReport(tuple(results), aborted_step=step.name)

    return VerifyReport(tuple(results))
