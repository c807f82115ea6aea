"""Build verification framework."""

from .checks import BUILD_CHECKS, VerifyContext, deployment_guidance
from .config import VerifyConfig, load_config
from .runner import run_steps
from .types import CheckResult, CheckStatus, FailureKind, VerifyReport

__all__ = [
    "CheckResult",
    "CheckStatus",
    "FailureKind",
    "VerifyConfig",
    "VerifyReport",
    "deployment_guidance",
    "load_config",
    "run_verification",
]


def run_verification(config: VerifyConfig) -> VerifyReport:
    """Run build checks against an install tree."""
    return run_steps(BUILD_CHECKS, VerifyContext(config))
