"""Deployment tarball creation."""

import tarfile
from datetime import date
from pathlib import Path


def package_name(prefix: str, day: date | None = None) -> str:
    day = day or date.today()
    return f"{prefix}-{day:%Y%m%d}.tar.gz"


def create_package(
    install_dir: Path,
    output_dir: Path | None = None,
    prefix: str = "ffmpeg-rv1126b",
    include_libs: bool = False,
    day: date | None = None,
) -> Path:
    """Pack ``bin/`` (and optionally ``lib/``) of an install tree.

    Members are stored relative to the install root so the archive extracts
    straight into a prefix such as ``/usr/local``.
    """
    bin_dir = install_dir / "bin"
    if not bin_dir.is_dir():
        raise FileNotFoundError(f"No bin/ directory in {install_dir}")

    output_dir = output_dir or install_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    tarball = output_dir / package_name(prefix, day)

    with tarfile.open(tarball, "w:gz") as tar:
        tar.add(bin_dir, arcname="bin")
        lib_dir = install_dir / "lib"
        if include_libs and lib_dir.is_dir():
            tar.add(lib_dir, arcname="lib")

    return tarball
