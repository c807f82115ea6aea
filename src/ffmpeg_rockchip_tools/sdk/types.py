"""SDK and cross-compile environment type definitions."""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_SDK_DIR = "RV1126B-P-SDK/rv1126b_linux6.1_sdk_v1.1.0"


@dataclass(frozen=True)
class SdkLayout:
    """Paths inside a vendor buildroot SDK."""

    root: Path
    target: str = "rockchip_rv1126b"
    triple: str = "aarch64-buildroot-linux-gnu"

    @property
    def buildroot_output(self) -> Path:
        return self.root / "buildroot" / "output" / self.target

    @property
    def toolchain(self) -> Path:
        return self.buildroot_output / "host"

    @property
    def toolchain_bin(self) -> Path:
        return self.toolchain / "bin"

    @property
    def sysroot(self) -> Path:
        return self.toolchain / self.triple / "sysroot"

    @property
    def pkgconfig_dir(self) -> Path:
        return self.sysroot / "usr" / "lib" / "pkgconfig"

    @property
    def cross_prefix(self) -> str:
        return f"{self.triple}-"

    def tool(self, name: str) -> Path:
        """Path of a prefixed toolchain binary (e.g. ``gcc``)."""
        return self.toolchain_bin / f"{self.cross_prefix}{name}"


@dataclass(frozen=True)
class CrossEnv:
    """Environment for configuring FFmpeg against the SDK sysroot."""

    sdk: SdkLayout
    ffmpeg_src: Path
    install_prefix: Path

    @property
    def pkg_config(self) -> Path:
        return self.sdk.toolchain_bin / "pkg-config"

    def variables(self, path: str = "") -> dict[str, str]:
        """Exported variables, in the order they are emitted.

        ``path`` is the PATH the toolchain directory is prepended to.
        """
        toolchain_bin = str(self.sdk.toolchain_bin)
        return {
            "SDK_ROOT": str(self.sdk.root),
            "STAGING": str(self.sdk.sysroot),
            "TOOLCHAIN": str(self.sdk.toolchain),
            "PATH": f"{toolchain_bin}:{path}" if path else toolchain_bin,
            "CROSS_PREFIX": self.sdk.cross_prefix,
            "PKG_CONFIG_PATH": str(self.sdk.pkgconfig_dir),
            "PKG_CONFIG_SYSROOT_DIR": str(self.sdk.sysroot),
            "PKG_CONFIG_LIBDIR": str(self.sdk.pkgconfig_dir),
            "PKG_CONFIG": str(self.pkg_config),
            "FFMPEG_SRC": str(self.ffmpeg_src),
            "FFMPEG_PREFIX": str(self.install_prefix),
            "FFMPEG_ROCKCHIP_ENV_LOADED": "1",
        }

    def configure_args(self) -> list[str]:
        """Minimal hardware-codec configure invocation."""
        return [
            "./configure",
            f"--prefix={self.install_prefix}",
            "--enable-cross-compile",
            f"--cross-prefix={self.sdk.cross_prefix}",
            "--arch=aarch64",
            "--target-os=linux",
            f"--sysroot={self.sdk.sysroot}",
            f"--pkg-config={self.pkg_config}",
            "--enable-gpl",
            "--enable-version3",
            "--enable-libdrm",
            "--enable-rkmpp",
            "--enable-rkrga",
            "--disable-static",
            "--enable-shared",
        ]
