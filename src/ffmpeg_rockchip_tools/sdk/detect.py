"""SDK location logic."""

import os
from pathlib import Path

from .types import DEFAULT_SDK_DIR, CrossEnv, SdkLayout


def default_sdk_root(base: Path | None = None) -> Path:
    """``$SDK_ROOT``, falling back to the SDK checked out beside ``base``."""
    env = os.environ.get("SDK_ROOT")
    if env:
        return Path(env)
    base = base or Path.cwd()
    return base.parent / DEFAULT_SDK_DIR


def build_cross_env(
    sdk_root: Path | None = None,
    ffmpeg_src: Path | None = None,
    install_prefix: Path | None = None,
) -> CrossEnv:
    """Assemble the cross environment record; nothing is checked here."""
    src = (ffmpeg_src or Path.cwd()).resolve()
    root = sdk_root or default_sdk_root(src)
    # Only resolve symlinks when the SDK exists, so error messages keep the given path
    if root.exists():
        root = root.resolve()
    prefix = install_prefix or Path(os.environ.get("FFMPEG_PREFIX", src / "install"))
    return CrossEnv(sdk=SdkLayout(root), ffmpeg_src=src, install_prefix=prefix)
