"""Shared fixtures: fake ELF binaries, install trees and tool scripts."""

from __future__ import annotations

import stat
import struct
from collections.abc import Callable
from pathlib import Path

import pytest

EM_AARCH64 = 183
EM_X86_64 = 62

DEFAULT_STRINGS = (
    "h264_rkmpp",
    "hevc_rkmpp",
    "scale_rkrga",
    "overlay_rkrga",
)

DEFAULT_NEEDED = (
    "librockchip_mpp.so.1",
    "librga.so.2",
    "libdrm.so.2",
    "libm.so.6",
    "libc.so.6",
)


def elf_bytes(
    machine: int = EM_AARCH64, bits: int = 64, strings: tuple[str, ...] = ()
) -> bytes:
    """Minimal little-endian ELF image followed by NUL-separated strings."""
    ident = b"\x7fELF" + bytes([2 if bits == 64 else 1, 1, 1, 0]) + b"\x00" * 8
    header = ident + struct.pack("<HHI", 2, machine, 1)
    body = b"\x00\x01\x02" + b"".join(s.encode() + b"\x00\xff" for s in strings)
    return header + b"\x00" * 44 + body


def write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def make_install(tmp_path: Path) -> Callable[..., Path]:
    """Factory for install trees shaped like ``make install`` output."""

    def _make(
        machine: int = EM_AARCH64,
        strings: tuple[str, ...] = DEFAULT_STRINGS,
        primary: bool = True,
        secondary: bool = True,
        libs: bool = True,
        pkgconfig: bool = True,
    ) -> Path:
        root = tmp_path / "install"
        bin_dir = root / "bin"
        bin_dir.mkdir(parents=True)
        if primary:
            (bin_dir / "ffmpeg").write_bytes(elf_bytes(machine, strings=strings))
        if secondary:
            (bin_dir / "ffprobe").write_bytes(elf_bytes(machine))
        if libs:
            lib_dir = root / "lib"
            lib_dir.mkdir()
            (lib_dir / "libavcodec.a").write_bytes(b"!<arch>\n" + b"\x00" * 100)
            (lib_dir / "libswscale.so.8").write_bytes(b"\x7fELF" + b"\x00" * 60)
            (lib_dir / "libswscale.so").symlink_to("libswscale.so.8")
            (lib_dir / "libz.a").write_bytes(b"!<arch>\n")
            if pkgconfig:
                pc_dir = lib_dir / "pkgconfig"
                pc_dir.mkdir()
                (pc_dir / "libavcodec.pc").write_text(
                    "prefix=/usr/local\nName: libavcodec\nVersion: 61.19.100\n"
                )
                (pc_dir / "libswscale.pc").write_text("Name: libswscale\nVersion: 8.3.100\n")
        return root

    return _make


@pytest.fixture
def tool_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty directory that is the whole PATH."""
    bin_dir = tmp_path / "tools"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", str(bin_dir))
    return bin_dir


@pytest.fixture
def fake_readelf(tool_path: Path) -> Callable[..., Path]:
    """Install a cross readelf that reports the given NEEDED entries."""

    def _make(
        needed: tuple[str, ...] = DEFAULT_NEEDED,
        name: str = "aarch64-linux-gnu-readelf",
    ) -> Path:
        lines = [
            f"printf '%s\\n' ' 0x0000000000000001 (NEEDED)             "
            f"Shared library: [{lib}]'"
            for lib in needed
        ]
        body = "\n".join(
            [
                "printf '%s\\n' 'Dynamic section at offset 0x1d8 contains 30 entries:'",
                "printf '%s\\n' '  Tag        Type                         Name/Value'",
                *lines,
                "printf '%s\\n' ' 0x000000000000000c (INIT)               0x4c8'",
                "",
            ]
        )
        return write_script(tool_path / name, body)

    return _make
