"""
Fetch response models.

Defines unified response structures for all resource adapters.
These models ensure consistent per-item error reporting, metrics tracking
and status handling across the different upstream endpoints.

Responsibility: Data transfer objects for adapter operations
"""

from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar, Optional, List, Dict, Any

from pydantic import BaseModel, Field


class FetchStatus(str, Enum):
    """
    Status of an adapter operation.

    Used by the orchestrator to decide whether dependent tasks can run.
    """
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"  # Some items failed, some succeeded
    FAILURE = "failure"
    SKIPPED = "skipped"  # Prerequisite produced no data


class FetchIssue(BaseModel):
    """
    Structured error information for a single failed item.

    Captures enough context (URL, sitting, committee code...) to find the
    failing request in the logs and retry it on the next run.
    """
    timestamp: datetime = Field(description="When the error occurred (UTC)")
    source: str = Field(description="Adapter that recorded the issue")
    error_type: str = Field(description="Exception class name or error category")
    message: str = Field(description="Human-readable error message")
    context: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional context (URL, record ID, etc.)"
    )
    retryable: bool = Field(
        default=False,
        description="Whether a later run may succeed"
    )
    deferred: bool = Field(
        default=False,
        description="Work left for a later run by a per-call cap, not a failure"
    )


class RequestMetrics(BaseModel):
    """
    Request counters scoped to one transport instance.

    Passed along with progress callbacks so a UI can show network activity
    without a shared global counter.
    """
    requests: int = Field(default=0, ge=0, description="HTTP requests issued")
    retries: int = Field(default=0, ge=0, description="Retries after transient failures")
    rate_limit_waits: int = Field(default=0, ge=0, description="429 cooldowns taken")
    not_found: int = Field(default=0, ge=0, description="404 responses received")
    failures: int = Field(default=0, ge=0, description="Requests that raised FetchError")
    in_flight: int = Field(default=0, ge=0, description="Requests currently awaiting a response")

    def snapshot(self) -> "RequestMetrics":
        """Return an immutable-by-convention copy for reporting."""
        return self.model_copy()


class FetchMetrics(BaseModel):
    """
    Operational metrics for one adapter execution.
    """
    records_fetched: int = Field(ge=0, description="Raw records returned")
    items_failed: int = Field(ge=0, description="Items skipped after an error")
    requests: int = Field(ge=0, default=0, description="HTTP requests issued by this fetch")
    duration_seconds: float = Field(ge=0.0, description="Total execution time in seconds")


T = TypeVar('T')


class FetchResponse(BaseModel, Generic[T]):
    """
    Unified response wrapper for all adapter operations.

    Generic type T is the raw record shape, normally a JSON object.
    Per-item failures are reported in ``issues`` while ``data`` keeps
    everything that was fetched successfully.

    Responsibility: Standard response container with status, data, issues, metrics
    """
    status: FetchStatus = Field(description="Operation status")
    data: List[T] = Field(
        default_factory=list,
        description="Raw records fetched"
    )
    issues: List[FetchIssue] = Field(
        default_factory=list,
        description="Per-item failures encountered during the fetch"
    )
    metrics: FetchMetrics = Field(description="Operation performance metrics")
    source: str = Field(description="Adapter identifier")
    fetch_timestamp: datetime = Field(description="When data was fetched (UTC)")

    @property
    def has_data(self) -> bool:
        return bool(self.data)


RawRecord = Dict[str, Any]
