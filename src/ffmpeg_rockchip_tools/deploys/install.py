"""
Install a packaged FFmpeg-Rockchip build on the target device using pyinfra.

Usage:
    pyinfra <host> deploys/install.py --data tarball=ffmpeg-rv1126b-20250101.tar.gz
    pyinfra <host> deploys/install.py --data tarball=... --data prefix=/opt/ffmpeg
"""

from pathlib import PurePosixPath

from pyinfra import logger
from pyinfra.api.deploy import deploy
from pyinfra.context import host
from pyinfra.operations import files, server

DEFAULT_PREFIX = "/usr/local"


@deploy("Install FFmpeg-Rockchip build")
def install_build(tarball: str, prefix: str = DEFAULT_PREFIX) -> None:
    """Upload and extract a build tarball, then smoke-test the rkmpp decoders."""
    remote_tarball = f"/tmp/{PurePosixPath(tarball).name}"

    upload = files.put(
        name="Upload FFmpeg build tarball",
        src=tarball,
        dest=remote_tarball,
    )

    files.directory(
        name=f"Ensure {prefix} exists",
        path=prefix,
        _if=upload.did_succeed,
    )

    extract = server.shell(
        name=f"Extract FFmpeg build to {prefix}",
        commands=[f"tar xzf {remote_tarball} -C {prefix}", "ldconfig"],
        _if=upload.did_succeed,
    )

    files.file(
        name="Remove uploaded tarball",
        path=remote_tarball,
        present=False,
        _if=extract.did_succeed,
    )

    server.shell(
        name="Check rkmpp decoders",
        commands=[f"{prefix}/bin/ffmpeg -hide_banner -decoders | grep rkmpp"],
        _if=extract.did_succeed,
    )


if __name__ == "__main__":
    tarball = host.data.get("tarball")
    if not tarball:
        logger.error("Missing required --data arg: tarball")
        exit(1)
    install_build(
        tarball=tarball,
        prefix=host.data.get("prefix", DEFAULT_PREFIX),
        _sudo=True,
    )
