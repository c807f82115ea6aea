"""Verification configuration, built once at startup."""

import os
import re
from dataclasses import dataclass
from pathlib import Path

INSTALL_DIR_ENV = "FFMPEG_PREFIX"

CODEC_NAMES = ("h264", "hevc", "vp8", "vp9", "av1")
FILTER_NAMES = ("scale", "vpp", "overlay", "transpose")

READELF_CANDIDATES = (
    "aarch64-buildroot-linux-gnu-readelf",
    "aarch64-linux-gnu-readelf",
)


@dataclass(frozen=True)
class LibraryRequirement:
    """A shared library the primary binary should link against."""

    label: str
    pattern: str  # substring of the NEEDED entry
    soname: str

    def matches(self, dependencies: list[str]) -> bool:
        return any(self.pattern in dep for dep in dependencies)


MPP = LibraryRequirement("MPP", "librockchip_mpp", "librockchip_mpp.so")
RGA = LibraryRequirement("RGA", "librga", "librga.so")
DRM = LibraryRequirement("DRM", "libdrm", "libdrm.so")


@dataclass(frozen=True)
class InstallLayout:
    """Expected shape of an install tree. Read only."""

    root: Path

    @property
    def bin_dir(self) -> Path:
        return self.root / "bin"

    @property
    def lib_dir(self) -> Path:
        return self.root / "lib"

    @property
    def pkgconfig_dir(self) -> Path:
        return self.lib_dir / "pkgconfig"

    def binary(self, name: str) -> Path:
        return self.bin_dir / name


@dataclass(frozen=True)
class VerifyConfig:
    """Everything the verifier needs to know about the expected build."""

    install_dir: Path
    primary_binary: str = "ffmpeg"
    secondary_binary: str = "ffprobe"
    expected_machine: str = "aarch64"
    expected_bits: int = 64
    readelf_candidates: tuple[str, ...] = READELF_CANDIDATES
    required_libraries: tuple[LibraryRequirement, ...] = (MPP, RGA)
    optional_libraries: tuple[LibraryRequirement, ...] = (DRM,)
    codec_names: tuple[str, ...] = CODEC_NAMES
    filter_names: tuple[str, ...] = FILTER_NAMES
    library_prefixes: tuple[str, ...] = ("libav", "libsw", "libpost")
    target_board: str = "RV1126B-P"
    package_prefix: str = "ffmpeg-rv1126b"

    @property
    def layout(self) -> InstallLayout:
        return InstallLayout(self.install_dir)

    @property
    def codec_pattern(self) -> re.Pattern[str]:
        return re.compile(rf"({'|'.join(self.codec_names)})_rkmpp")

    @property
    def filter_pattern(self) -> re.Pattern[str]:
        return re.compile(rf"({'|'.join(self.filter_names)})_rkrga")


def default_install_dir() -> Path:
    """``$FFMPEG_PREFIX``, falling back to ``./install``."""
    env = os.environ.get(INSTALL_DIR_ENV)
    if env:
        return Path(env)
    return Path.cwd() / "install"


def load_config(install_dir: str | Path | None = None) -> VerifyConfig:
    path = Path(install_dir) if install_dir else default_install_dir()
    return VerifyConfig(install_dir=path.expanduser().resolve())
