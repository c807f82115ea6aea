"""Verification checks for the cross-compile environment."""

import os
import shutil
from collections.abc import Callable
from pathlib import Path

from rich.filesize import decimal

from ffmpeg_rockchip_tools.verify.runner import run_check, run_steps
from ffmpeg_rockchip_tools.verify.tools import ToolUnavailable
from ffmpeg_rockchip_tools.verify.types import (
    CheckResult,
    CheckStatus,
    CheckStep,
    FailureKind,
    VerifyReport,
)

from .types import CrossEnv


def _build_hint(env: CrossEnv) -> str:
    return f"Build the SDK first: cd {env.sdk.root} && ./build.sh"


def _dir_check(name: str, path: Path, remediation: str) -> list[CheckResult]:
    if path.is_dir():
        return [CheckResult(name, CheckStatus.PASS, str(path))]
    return [
        CheckResult(
            name,
            CheckStatus.FAIL,
            f"Not found: {path}",
            remediation=remediation,
            kind=FailureKind.MISSING_ARTIFACT,
        )
    ]


def check_sdk_root(env: CrossEnv) -> list[CheckResult]:
    return _dir_check(
        "SDK root",
        env.sdk.root,
        "Check out the SDK beside this repository, or export "
        "SDK_ROOT=/path/to/rv1126b_linux6.1_sdk_v1.1.0",
    )


def check_buildroot_output(env: CrossEnv) -> list[CheckResult]:
    return _dir_check("Buildroot output", env.sdk.buildroot_output, _build_hint(env))


def check_sysroot(env: CrossEnv) -> list[CheckResult]:
    return _dir_check(
        "Sysroot",
        env.sdk.sysroot,
        f"SDK buildroot output looks incomplete. {_build_hint(env)}",
    )


def check_toolchain(env: CrossEnv) -> list[CheckResult]:
    gcc = env.sdk.tool("gcc")
    if not gcc.is_file():
        return [
            CheckResult(
                "Toolchain",
                CheckStatus.FAIL,
                f"Cross-compiler not found: {gcc}",
                remediation=f"Toolchain should be at: {env.sdk.toolchain_bin}",
                kind=FailureKind.MISSING_ARTIFACT,
            )
        ]
    try:
        return [
            run_check(
                "Toolchain",
                [str(gcc), "-dumpversion"],
                lambda x: bool(x),
                pass_msg=f"{gcc.name} {{result}}",
                fail_msg=f"{gcc.name} does not run",
                kind=FailureKind.TOOL_UNAVAILABLE,
            )
        ]
    except ToolUnavailable as exc:
        return [
            CheckResult(
                "Toolchain",
                CheckStatus.FAIL,
                str(exc),
                kind=FailureKind.TOOL_UNAVAILABLE,
            )
        ]


def _file_result(name: str, path: Path, what: str) -> CheckResult:
    if not path.exists():
        return CheckResult(
            name,
            CheckStatus.WARN,
            f"{what} not found: {path}",
            remediation="Enable the package in the SDK buildroot config and rebuild",
        )
    if path.is_file():
        return CheckResult(name, CheckStatus.PASS, f"{path} ({decimal(path.stat().st_size)})")
    return CheckResult(name, CheckStatus.PASS, str(path))


def _find_pkg_config(env: CrossEnv) -> str | None:
    if env.pkg_config.is_file():
        return str(env.pkg_config)
    return shutil.which("pkg-config")


def sdk_library_check(
    label: str, module: str, header: str, library: str, purpose: str
) -> Callable[[CrossEnv], list[CheckResult]]:
    """Build a check that a vendor library is visible through pkg-config.

    ``header`` and ``library`` are relative to the sysroot.
    """

    def check(env: CrossEnv) -> list[CheckResult]:
        pkg_config = _find_pkg_config(env)
        if pkg_config is None:
            return [
                CheckResult(
                    label,
                    CheckStatus.WARN,
                    "pkg-config not found, checking files only",
                    kind=FailureKind.TOOL_UNAVAILABLE,
                ),
                _file_result(f"{label} headers", env.sdk.sysroot / header, "Headers"),
                _file_result(f"{label} library", env.sdk.sysroot / library, "Library"),
            ]

        variables = env.variables(os.environ.get("PATH", ""))
        try:
            result = run_check(
                label,
                [pkg_config, "--modversion", module],
                lambda x: bool(x),
                pass_msg="v{result}",
                fail_msg=f"{module} not found via pkg-config ({purpose})",
                remediation=_build_hint(env),
                kind=FailureKind.MISSING_REQUIRED_DEPENDENCY,
                env={**os.environ, **variables},
            )
        except ToolUnavailable as exc:
            return [
                CheckResult(
                    label, CheckStatus.FAIL, str(exc), kind=FailureKind.TOOL_UNAVAILABLE
                )
            ]
        if result.failed:
            return [result]
        return [
            result,
            _file_result(f"{label} headers", env.sdk.sysroot / header, "Headers"),
            _file_result(f"{label} library", env.sdk.sysroot / library, "Library"),
        ]

    return check


ENV_CHECKS: tuple[CheckStep, ...] = (
    CheckStep("SDK root", check_sdk_root, critical=True),
    CheckStep("Buildroot output", check_buildroot_output, critical=True),
    CheckStep("Sysroot", check_sysroot, critical=True),
    CheckStep("Toolchain", check_toolchain, critical=True),
    CheckStep(
        "MPP",
        sdk_library_check(
            "MPP",
            "rockchip_mpp",
            "usr/include/rockchip/rk_mpi.h",
            "usr/lib/librockchip_mpp.so",
            "hardware video encoding/decoding",
        ),
        critical=True,
    ),
    CheckStep(
        "RGA",
        sdk_library_check(
            "RGA",
            "librga",
            "usr/include/rga",
            "usr/lib/librga.so",
            "hardware 2D graphics acceleration",
        ),
        critical=True,
    ),
)


def run_env_checks(env: CrossEnv) -> VerifyReport:
    """Check the SDK, toolchain and vendor libraries a build needs."""
    return run_steps(ENV_CHECKS, env)
