"""
Fetch orchestrator.

Runs adapters sequentially in dependency order (votings before ballots,
committees before sessions before statements, members before financial
disclosures), reporting (done / total) x 100 progress after each task.
A task whose prerequisite produced no data is skipped, not retried.

Sequential execution is deliberate for a rate-limited upstream; the only
concurrency is inside the transcripts adapter's paced batches.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from ..adapters.base_adapter import BaseAdapter, FetchContext
from ..models.fetch_models import FetchIssue, FetchResponse, RawRecord, RequestMetrics
from ..models.sync_models import KIND_ORDER, PREREQUISITES, ResourceKind

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str, RequestMetrics], None]
TaskSink = Callable[[ResourceKind, FetchResponse], Awaitable[None]]

TASK_LABELS = {
    ResourceKind.MEMBERS: "Members",
    ResourceKind.SITTINGS: "Sitting list",
    ResourceKind.STATEMENTS: "Transcripts",
    ResourceKind.VOTINGS: "Votings",
    ResourceKind.BALLOTS: "Ballots",
    ResourceKind.COMMITTEES: "Committees",
    ResourceKind.COMMITTEE_SESSIONS: "Committee sessions",
    ResourceKind.COMMITTEE_STATEMENTS: "Committee statements",
    ResourceKind.INTERPELLATIONS: "Interpellations",
    ResourceKind.WRITTEN_QUESTIONS: "Written questions",
    ResourceKind.LEGISLATIVE_DRAFTS: "Legislative drafts",
    ResourceKind.ENACTED_ACTS: "Enacted acts",
    ResourceKind.FINANCIAL_DISCLOSURES: "Financial disclosures",
}


@dataclass
class OrchestratorResult:
    """Raw data bag keyed by kind, plus per-task bookkeeping."""
    data: Dict[ResourceKind, List[RawRecord]] = field(default_factory=dict)
    responses: Dict[ResourceKind, FetchResponse] = field(default_factory=dict)
    completed: List[ResourceKind] = field(default_factory=list)
    skipped: List[ResourceKind] = field(default_factory=list)

    @property
    def issues(self) -> List[FetchIssue]:
        return [issue for r in self.responses.values() for issue in r.issues]


class FetchOrchestrator:
    """
    Example:
        orchestrator = FetchOrchestrator(build_adapters(transport), on_progress=print)
        result = await orchestrator.run([ResourceKind.BALLOTS, ResourceKind.VOTINGS], context)
        result.data[ResourceKind.BALLOTS]
    """

    def __init__(
        self,
        adapters: Dict[ResourceKind, BaseAdapter],
        on_progress: Optional[ProgressCallback] = None,
        on_task_complete: Optional[TaskSink] = None,
        metrics: Optional[RequestMetrics] = None,
    ):
        self.adapters = adapters
        self.metrics = metrics or RequestMetrics()
        self.on_progress = on_progress
        self.on_task_complete = on_task_complete

    @staticmethod
    def build_tasks(kinds: Iterable[ResourceKind]) -> List[ResourceKind]:
        """Deduplicate and order kinds so prerequisites run first."""
        wanted = set(kinds)
        return [kind for kind in KIND_ORDER if kind in wanted]

    def _prerequisite_missing(
        self,
        kind: ResourceKind,
        tasks: List[ResourceKind],
        context: FetchContext,
    ) -> bool:
        parent = PREREQUISITES.get(kind)
        if parent is None:
            return False
        if parent == ResourceKind.MEMBERS:
            return not context.prerequisites.get(parent) and not context.member_ids
        if parent not in tasks and parent not in context.prerequisites:
            return True
        return not context.prerequisites.get(parent)

    async def run(self, kinds: Iterable[ResourceKind], context: FetchContext) -> OrchestratorResult:
        """
        Execute every task in order.

        Raises:
            PipelineCancelled: When the context's token is cancelled
                between tasks; data of completed tasks has already been
                handed to on_task_complete
        """
        tasks = self.build_tasks(kinds)
        total = len(tasks)
        result = OrchestratorResult()
        logger.info(f"Running {total} fetch tasks: {[k.value for k in tasks]}")

        for index, kind in enumerate(tasks, start=1):
            context.check_cancelled()
            label = TASK_LABELS[kind]

            if self._prerequisite_missing(kind, tasks, context):
                logger.info(f"Skipping {kind.value}: prerequisite produced no data")
                result.skipped.append(kind)
                self._report(index, total, f"{label} skipped")
                continue

            response = await self.adapters[kind].fetch(context)
            result.responses[kind] = response
            result.data[kind] = response.data
            context.prerequisites[kind] = response.data

            if self.on_task_complete:
                await self.on_task_complete(kind, response)
            result.completed.append(kind)

            logger.info(
                f"Task {index}/{total} {kind.value}: {response.status.value}, "
                f"{len(response.data)} records, {len(response.issues)} issues"
            )
            self._report(index, total, f"{label}: {len(response.data)}")

        return result

    def _report(self, done: int, total: int, label: str) -> None:
        if self.on_progress:
            self.on_progress(done / total * 100 if total else 100.0, label, self.metrics.snapshot())
