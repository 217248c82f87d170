"""
Orchestration: planning, fetch task ordering, cancellation and the sync pipeline.

Import the pipeline from ``sejm_sync.orchestration.pipeline``; adapters
import the cancellation primitives from this package.
"""

from .cancellation import CancellationToken, PipelineCancelled

__all__ = ["CancellationToken", "PipelineCancelled"]
