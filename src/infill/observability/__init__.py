"""Diagnostics helpers."""

from infill.observability.post_process_logger import PostProcessLogger

__all__ = ["PostProcessLogger"]
