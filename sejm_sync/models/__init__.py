"""
Models package for sejm-sync.

This package contains all Pydantic models for:
- Adapter responses and request metrics
- Sync configuration, plans, state and results
- Normalized entities (members, sittings, votes, committees, documents)
"""

from .fetch_models import (
    FetchStatus,
    FetchIssue,
    RequestMetrics,
    FetchMetrics,
    FetchResponse,
)
from .sync_models import (
    ResourceKind,
    Chamber,
    SpeedProfile,
    RangeSelector,
    SyncConfig,
    SittingTarget,
    FetchPlan,
    SyncState,
    PipelineOutcome,
    PipelineResult,
)

__all__ = [
    "FetchStatus",
    "FetchIssue",
    "RequestMetrics",
    "FetchMetrics",
    "FetchResponse",
    "ResourceKind",
    "Chamber",
    "SpeedProfile",
    "RangeSelector",
    "SyncConfig",
    "SittingTarget",
    "FetchPlan",
    "SyncState",
    "PipelineOutcome",
    "PipelineResult",
]
