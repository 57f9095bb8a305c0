"""Runtime wiring for the completion pipeline."""

from infill.runtime.app import configure_logging, run_completion
from infill.runtime.factory import build_provider_config

__all__ = [
    "build_provider_config",
    "configure_logging",
    "run_completion",
]
