"""
Base adapter interface for all upstream resources.

Defines the contract every resource adapter (members, sittings,
transcripts, votings...) implements. Ensures consistent error handling,
pagination and response format across endpoints.

Responsibility: Abstract base class defining adapter contract
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional, Set, Tuple
import logging

from ..models.fetch_models import (
    FetchIssue,
    FetchMetrics,
    FetchResponse,
    FetchStatus,
    RawRecord,
)
from ..models.sync_models import Chamber, ResourceKind, SittingTarget, SpeedProfile
from ..orchestration.cancellation import CancellationToken
from .transport import FetchError, SejmTransport


@dataclass
class FetchContext:
    """
    Configuration bag handed to every adapter.

    ``prerequisites`` carries the raw output of tasks this one depends on
    (votings for ballots, committees for sessions...).
    ``stored_ballot_votings`` and ``stored_committee_sessions`` list work
    already in the store, as (sitting, voting number) and (committee code,
    session number), so capped adapters continue after it.
    """
    term: int
    chamber: Chamber = Chamber.SEJM
    speed: SpeedProfile = SpeedProfile.NORMAL
    sittings: List[SittingTarget] = field(default_factory=list)
    committee_codes: Optional[List[str]] = None
    member_ids: List[str] = field(default_factory=list)
    enacted_acts_publisher: str = "DU"
    enacted_acts_year: Optional[int] = None
    stored_ballot_votings: Set[Tuple[int, int]] = field(default_factory=set)
    stored_committee_sessions: Set[Tuple[str, int]] = field(default_factory=set)
    cancel_token: Optional[CancellationToken] = None
    prerequisites: Dict[ResourceKind, List[RawRecord]] = field(default_factory=dict)

    def check_cancelled(self) -> None:
        if self.cancel_token:
            self.cancel_token.raise_if_cancelled()

    def sittings_for(self, kind: ResourceKind) -> List[SittingTarget]:
        """Target sittings that still lack ``kind``."""
        return [s for s in self.sittings if kind in s.kinds]


class BaseAdapter(ABC):
    """
    Abstract base class for all resource adapters.

    Every adapter MUST:
    1. Implement fetch() to retrieve raw records for its kind
    2. Use self.transport for every request (retries, metrics)
    3. Record per-item failures as FetchIssue and keep going
    4. Return FetchResponse with the data it managed to fetch

    Subclasses should NOT:
    - Raise FetchError for a single failed item (record an issue instead)
    - Write to the store (normalization happens downstream)
    - Store state between fetch() calls
    """

    kind: ResourceKind

    def __init__(self, transport: SejmTransport, source_name: Optional[str] = None):
        """
        Args:
            transport: Shared HTTP transport
            source_name: Identifier used in logs and issues (defaults to kind)
        """
        self.transport = transport
        self.source_name = source_name or self.kind.value
        self.logger = logging.getLogger(f"adapter.{self.source_name}")

    @abstractmethod
    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        """
        Fetch raw records for this resource kind.

        Args:
            context: Term, chamber, filters, prerequisites, cancellation

        Returns:
            FetchResponse containing raw records, issues and metrics
        """
        pass

    @staticmethod
    def term_path(context: FetchContext, *parts: Any) -> str:
        """Build /{chamber}/term{N}/{parts...}"""
        suffix = "/".join(str(p) for p in parts)
        return f"/{context.chamber.value}/term{context.term}/{suffix}"

    async def fetch_list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[RawRecord]:
        """Fetch an endpoint expected to return a JSON array."""
        data = await self.transport.fetch_json(path, params=params)
        if isinstance(data, dict) and isinstance(data.get("items"), list):
            return data["items"]
        if not isinstance(data, list):
            raise FetchError(self.transport.url(path), None, "expected a JSON array")
        return data

    async def fetch_paginated(
        self,
        path: str,
        context: FetchContext,
        page_size: int = 500,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[List[RawRecord], List[FetchIssue]]:
        """
        Offset-paginated fetch loop.

        Continues until a page returns fewer than ``page_size`` items.
        A failure mid-loop returns what was accumulated plus one issue.
        """
        records: List[RawRecord] = []
        issues: List[FetchIssue] = []
        offset = 0

        while True:
            context.check_cancelled()
            page_params = {**(params or {}), "offset": offset, "limit": page_size}
            try:
                page = await self.fetch_list(path, params=page_params)
            except FetchError as e:
                self.logger.warning(
                    f"Pagination stopped at offset {offset} after {len(records)} records: {e}"
                )
                issues.append(self._issue(e, url=e.url, offset=offset))
                break

            records.extend(page)
            self.logger.debug(f"Fetched {len(page)} records at offset {offset}")
            if len(page) < page_size:
                break
            offset += page_size

        return records, issues

    def _issue(self, error: Exception, **context: Any) -> FetchIssue:
        status = getattr(error, "status", None)
        return FetchIssue(
            timestamp=datetime.now(UTC),
            source=self.source_name,
            error_type=type(error).__name__,
            message=str(error),
            context={k: v for k, v in context.items() if v is not None},
            retryable=status is None or status == 429 or status >= 500,
        )

    def _deferred_issue(self, message: str, **context: Any) -> FetchIssue:
        """Issue for work a per-call cap leaves to the next run."""
        return FetchIssue(
            timestamp=datetime.now(UTC),
            source=self.source_name,
            error_type="Deferred",
            message=message,
            context={k: v for k, v in context.items() if v is not None},
            retryable=True,
            deferred=True,
        )

    def _build_success_response(
        self,
        data: List[RawRecord],
        issues: List[FetchIssue],
        start_time: datetime,
        start_requests: int = 0,
    ) -> FetchResponse[RawRecord]:
        """
        Build a FetchResponse from what was fetched.

        Status is PARTIAL_SUCCESS when any item failed.
        """
        end_time = datetime.now(UTC)
        status = FetchStatus.PARTIAL_SUCCESS if issues else FetchStatus.SUCCESS

        return FetchResponse[RawRecord](
            status=status,
            data=data,
            issues=issues,
            metrics=FetchMetrics(
                records_fetched=len(data),
                items_failed=len(issues),
                requests=max(self.transport.metrics.requests - start_requests, 0),
                duration_seconds=(end_time - start_time).total_seconds(),
            ),
            source=self.source_name,
            fetch_timestamp=end_time,
        )

    def _build_failure_response(
        self,
        error: Exception,
        start_time: datetime,
        start_requests: int = 0,
        **context: Any,
    ) -> FetchResponse[RawRecord]:
        """
        Build a failed FetchResponse.

        Used when the whole fetch fails (e.g. the list endpoint itself).
        """
        end_time = datetime.now(UTC)

        return FetchResponse[RawRecord](
            status=FetchStatus.FAILURE,
            data=[],
            issues=[self._issue(error, **context)],
            metrics=FetchMetrics(
                records_fetched=0,
                items_failed=1,
                requests=max(self.transport.metrics.requests - start_requests, 0),
                duration_seconds=(end_time - start_time).total_seconds(),
            ),
            source=self.source_name,
            fetch_timestamp=end_time,
        )

    def _start(self) -> Tuple[datetime, int]:
        return datetime.now(UTC), self.transport.metrics.requests
