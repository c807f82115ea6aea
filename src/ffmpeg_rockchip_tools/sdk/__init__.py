"""Cross-compile environment for the vendor SDK."""

from .checks import run_env_checks
from .detect import build_cross_env, default_sdk_root
from .types import CrossEnv, SdkLayout

__all__ = [
    "build_cross_env",
    "default_sdk_root",
    "run_env_checks",
    "CrossEnv",
    "SdkLayout",
]
