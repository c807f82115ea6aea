"""Build verification checks for cross-compiled FFmpeg-Rockchip."""

from dataclasses import dataclass
from pathlib import Path
from typing import cast

from rich.filesize import decimal

from .config import VerifyConfig
from .tools import (
    NotAnElf,
    ToolUnavailable,
    find_tool,
    list_library_files,
    list_needed_libraries,
    list_pkgconfig_files,
    match_strings,
    read_elf_header,
    scan_strings,
)
from .types import CheckResult, CheckStatus, CheckStep, FailureKind

CROSS_COMPILE_HINT = (
    "Source the cross-compile environment (eval \"$(rkffmpeg env --shell)\") "
    "and re-run ./configure with --enable-cross-compile --arch=aarch64"
)

INSTALL_HINT = "Run 'make install' first!"


@dataclass
class VerifyContext:
    """Artifacts shared between steps of one run."""

    config: VerifyConfig
    primary_binary: Path | None = None

    @property
    def binary(self) -> Path:
        """Primary binary; steps using it declare ``requires="primary_binary"``."""
        return cast(Path, self.primary_binary)


def check_install_dir(ctx: VerifyContext) -> list[CheckResult]:
    root = ctx.config.install_dir
    if root.is_dir():
        return [CheckResult("Install directory", CheckStatus.PASS, str(root))]
    return [
        CheckResult(
            "Install directory",
            CheckStatus.FAIL,
            f"Not found: {root}",
            remediation=INSTALL_HINT,
            kind=FailureKind.MISSING_ARTIFACT,
        )
    ]


def check_binaries(ctx: VerifyContext) -> list[CheckResult]:
    layout = ctx.config.layout
    results = []

    primary = layout.binary(ctx.config.primary_binary)
    if primary.is_file():
        ctx.primary_binary = primary
        results.append(
            CheckResult(
                f"{primary.name} binary",
                CheckStatus.PASS,
                f"Found ({decimal(primary.stat().st_size)})",
            )
        )
    else:
        results.append(
            CheckResult(
                f"{primary.name} binary",
                CheckStatus.FAIL,
                f"Not found: {primary}",
                remediation=INSTALL_HINT,
                kind=FailureKind.MISSING_ARTIFACT,
            )
        )

    secondary = layout.binary(ctx.config.secondary_binary)
    if secondary.is_file():
        results.append(
            CheckResult(
                f"{secondary.name} binary",
                CheckStatus.PASS,
                f"Found ({decimal(secondary.stat().st_size)})",
            )
        )
    else:
        results.append(
            CheckResult(
                f"{secondary.name} binary",
                CheckStatus.WARN,
                "Not found",
                remediation="Configure without --disable-ffprobe and re-run make install",
                kind=FailureKind.MISSING_ARTIFACT,
            )
        )

    return results


def check_architecture(ctx: VerifyContext) -> list[CheckResult]:
    config = ctx.config
    binary = ctx.binary

    try:
        header = read_elf_header(binary)
    except NotAnElf as exc:
        return [
            CheckResult(
                "Architecture",
                CheckStatus.FAIL,
                str(exc),
                remediation=CROSS_COMPILE_HINT,
                kind=FailureKind.WRONG_ARCHITECTURE,
            )
        ]

    description = header.describe()
    expected = (config.expected_machine, config.expected_bits)
    if (header.machine_name, header.bits) == expected:
        return [CheckResult("Architecture", CheckStatus.PASS, description)]

    return [
        CheckResult(
            "Architecture",
            CheckStatus.FAIL,
            f"Wrong architecture: {description} "
            f"(expected {config.expected_bits}-bit {config.expected_machine})",
            remediation=CROSS_COMPILE_HINT,
            kind=FailureKind.WRONG_ARCHITECTURE,
        )
    ]


def check_dependencies(ctx: VerifyContext) -> list[CheckResult]:
    config = ctx.config
    binary = ctx.binary

    try:
        readelf = find_tool(config.readelf_candidates)
        dependencies = list_needed_libraries(readelf, binary)
    except ToolUnavailable as exc:
        return [
            CheckResult(
                "Dependencies",
                CheckStatus.WARN,
                f"No ARM readelf usable ({exc}), skipping dependency check",
                remediation="Install aarch64 binutils (e.g. binutils-aarch64-linux-gnu) "
                "or put the SDK toolchain bin/ on PATH",
                kind=FailureKind.TOOL_UNAVAILABLE,
            )
        ]

    results = []
    for lib in config.required_libraries + config.optional_libraries:
        name = f"{lib.label} library"
        if lib.matches(dependencies):
            results.append(CheckResult(name, CheckStatus.PASS, f"Linked ({lib.soname})"))
        elif lib in config.required_libraries:
            results.append(
                CheckResult(
                    name,
                    CheckStatus.FAIL,
                    f"{lib.soname} NOT linked",
                    remediation=f"Put the {lib.label} library in the sysroot, configure "
                    "with --enable-rkmpp --enable-rkrga and rebuild",
                    kind=FailureKind.MISSING_REQUIRED_DEPENDENCY,
                )
            )
        else:
            results.append(
                CheckResult(
                    name,
                    CheckStatus.WARN,
                    f"{lib.soname} not linked",
                    remediation=f"Configure with --enable-{lib.pattern} and rebuild",
                )
            )

    results.append(
        CheckResult(
            "Dependencies",
            CheckStatus.INFO,
            f"{len(dependencies)} shared libraries",
            details=tuple(dependencies),
        )
    )
    return results


def _feature_result(name: str, matches: list[str], expected: str) -> CheckResult:
    if matches:
        return CheckResult(
            name, CheckStatus.PASS, f"{len(matches)} found", details=tuple(matches)
        )
    return CheckResult(
        name,
        CheckStatus.FAIL,
        f"None found (expected {expected})",
        remediation="Configure with --enable-rkmpp --enable-rkrga and rebuild",
        kind=FailureKind.MISSING_REQUIRED_FEATURE,
    )


def check_features(ctx: VerifyContext) -> list[CheckResult]:
    config = ctx.config
    binary = ctx.binary

    strings = scan_strings(binary)
    codecs = match_strings(strings, config.codec_pattern)
    filters = match_strings(strings, config.filter_pattern)
    return [
        _feature_result("MPP codecs", codecs, config.codec_pattern.pattern),
        _feature_result("RGA filters", filters, config.filter_pattern.pattern),
    ]


def check_libraries(ctx: VerifyContext) -> list[CheckResult]:
    config = ctx.config
    lib_dir = config.layout.lib_dir
    if not lib_dir.is_dir():
        return [
            CheckResult(
                "Libraries",
                CheckStatus.WARN,
                "Library directory not found",
                remediation=INSTALL_HINT,
            )
        ]

    libraries = list_library_files(lib_dir, config.library_prefixes)
    if not libraries:
        return [
            CheckResult(
                "Libraries",
                CheckStatus.WARN,
                f"No {'/'.join(config.library_prefixes)} libraries in {lib_dir}",
                remediation=INSTALL_HINT,
            )
        ]

    total = sum(lib.size for lib in libraries)
    return [
        CheckResult(
            "Libraries",
            CheckStatus.PASS,
            f"{len(libraries)} FFmpeg libraries ({decimal(total)})",
            details=tuple(f"{lib.name} ({decimal(lib.size)})" for lib in libraries),
        )
    ]


def check_pkgconfig(ctx: VerifyContext) -> list[CheckResult]:
    pc_dir = ctx.config.layout.pkgconfig_dir
    name = "pkg-config files"
    if not pc_dir.is_dir():
        return [
            CheckResult(
                name,
                CheckStatus.WARN,
                "pkg-config directory not found",
                remediation=INSTALL_HINT,
            )
        ]

    entries = list_pkgconfig_files(pc_dir)
    if not entries:
        return [
            CheckResult(
                name,
                CheckStatus.WARN,
                f"No .pc files in {pc_dir}",
                remediation=INSTALL_HINT,
            )
        ]

    return [
        CheckResult(
            name,
            CheckStatus.PASS,
            f"{len(entries)} pkg-config files",
            details=tuple(f"{e.name} (v{e.version or '?'})" for e in entries),
        )
    ]


BINARY = "primary_binary"

BUILD_CHECKS: tuple[CheckStep, ...] = (
    CheckStep("Install directory", check_install_dir, critical=True),
    CheckStep("Binaries", check_binaries, critical=True),
    CheckStep("Architecture", check_architecture, critical=True, requires=BINARY),
    CheckStep("Dependencies", check_dependencies, critical=True, requires=BINARY),
    CheckStep("Features", check_features, critical=True, requires=BINARY),
    CheckStep("Libraries", check_libraries),
    CheckStep("pkg-config", check_pkgconfig),
)


def deployment_guidance(config: VerifyConfig) -> list[str]:
    """Next steps printed after a passing verification."""
    return [
        "1. Create deployment package:",
        "     rkffmpeg package",
        f"   or: cd {config.install_dir} && "
        f"tar czf {config.package_prefix}-$(date +%Y%m%d).tar.gz bin/",
        f"2. When you receive your {config.target_board} device:",
        "     - Transfer the tarball to the device",
        "       (or: rkffmpeg deploy HOST --tarball FILE)",
        "     - Extract to /usr/local:",
        f"       tar xzf {config.package_prefix}-*.tar.gz -C /usr/local",
        "     - Test: ffmpeg -decoders | grep rkmpp",
        "3. See deployment guide:",
        "     https://github.com/Fanconn-RV1126B-P/RV1126B-P-Docs",
    ]
