"""
Sync pipeline orchestration.

Coordinates one sync run end to end: check cache -> plan -> fetch ->
filter -> normalize -> persist -> record sync metadata -> report.

Each fetch task's data is privacy-filtered, normalized and committed as
soon as the task finishes, together with the sync metadata describing
it. A cancelled or failed run therefore leaves completed tasks' rows in
place and the next run's plan skips them.

Responsibility: Run the stages in order and turn every exit into a PipelineResult
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union

import httpx

from ..adapters import build_adapters
from ..adapters.base_adapter import FetchContext
from ..adapters.transport import SejmTransport
from ..config import Settings, settings as default_settings
from ..db.repositories import (
    CommitteeSessionRepository,
    MemberRepository,
    SittingRepository,
    SyncMetadataRepository,
    VotingRepository,
)
from ..db.session import Database
from ..models.fetch_models import FetchIssue, FetchResponse, FetchStatus, RequestMetrics
from ..models.sync_models import (
    SITTING_KINDS,
    FetchPlan,
    PipelineOutcome,
    PipelineResult,
    ResourceKind,
    SittingTarget,
    SyncConfig,
)
from ..normalizers import Normalizer
from .cancellation import CancellationToken, PipelineCancelled
from .orchestrator import FetchOrchestrator
from .planner import SyncPlanner
from .privacy import apply_privacy_filter

logger = logging.getLogger(__name__)

# Share of the progress bar given to the fetch stage; the rest covers
# planning before it and metadata bookkeeping after it.
FETCH_PROGRESS_START = 10.0
FETCH_PROGRESS_END = 95.0


class PipelineError(Exception):
    """Raised when a stage cannot continue (e.g. the sitting list is unavailable)"""


class PipelineBusyError(RuntimeError):
    """Raised when run() is called while another run of the same pipeline is active"""


@dataclass
class PipelineCallbacks:
    on_progress: Optional[Callable[[float, str, RequestMetrics], None]] = None
    on_log: Optional[Callable[[str], None]] = None
    on_error: Optional[Callable[[BaseException], None]] = None
    on_complete: Optional[Callable[[PipelineResult], None]] = None


class SyncPipeline:
    """
    Orchestrates a complete sync run against one SQLite store.

    Pipeline stages:
    1. Init DB (create tables)
    2. Check cache and plan the delta
    3. Resolve target sittings (refreshing the sitting list when stale)
    4. Filter per-term modules
    5. Fetch, with per-task privacy filter + normalize + persist
    6. Update sync metadata
    7. Report

    Example:
        pipeline = SyncPipeline(database=db)
        result = await pipeline.run(
            SyncConfig(modules=[ResourceKind.VOTINGS, ResourceKind.BALLOTS],
                       range=RangeSelector.last_n(2)),
            callbacks=PipelineCallbacks(on_progress=show),
        )
        result.counts["ballots"]
    """

    def __init__(
        self,
        database: Optional[Database] = None,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        planner: Optional[SyncPlanner] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            database: Store to sync into (defaults to one built from settings)
            settings: Application settings
            client: HTTP client to share across runs (tests pass a mocked one)
            planner: Sync planner (defaults to one using settings' cache TTLs)
            clock: Returns the current timezone-aware time
        """
        self.settings = settings or default_settings
        self.database = database or Database(self.settings.db)
        self.client = client
        self.planner = planner or SyncPlanner(self.settings.cache)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def run(
        self,
        config: Union[SyncConfig, Dict[str, Any]],
        callbacks: Optional[PipelineCallbacks] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PipelineResult:
        """
        Run one sync.

        Args:
            config: SyncConfig, or a mapping validated into one
            callbacks: Progress / log / error / completion hooks
            cancel_token: Checked between stages and tasks

        Returns:
            PipelineResult; never raises for fetch, validation or store
            errors, which end the run as FAILED

        Raises:
            PipelineBusyError: If this pipeline is already running
        """
        if self._running:
            raise PipelineBusyError("A sync is already running")

        self._running = True
        try:
            run = _Run(self, callbacks or PipelineCallbacks(), cancel_token or CancellationToken())
            return await run.execute(config)
        finally:
            self._running = False


class _Run:
    """State of a single pipeline run."""

    def __init__(self, pipeline: SyncPipeline, callbacks: PipelineCallbacks, token: CancellationToken):
        self.pipeline = pipeline
        self.database = pipeline.database
        self.callbacks = callbacks
        self.token = token
        self.metrics = RequestMetrics()
        self.started = time.monotonic()
        self.now = pipeline.clock()

        self.counts: Dict[str, int] = {}
        self.fetched: Dict[str, int] = {}
        self.issues: List[FetchIssue] = []
        self.plan: Optional[FetchPlan] = None
        self.normalizer: Optional[Normalizer] = None
        self.config: Optional[SyncConfig] = None

    def log(self, message: str) -> None:
        logger.info(message)
        if self.callbacks.on_log:
            self.callbacks.on_log(message)

    def progress(self, pct: float, label: str) -> None:
        if self.callbacks.on_progress:
            self.callbacks.on_progress(pct, label, self.metrics.snapshot())

    def stage(self, number: int, name: str, pct: float) -> None:
        self.token.raise_if_cancelled()
        self.log(f"Stage {number}: {name}")
        self.progress(pct, name)

    async def execute(self, config: Union[SyncConfig, Dict[str, Any]]) -> PipelineResult:
        try:
            self.config = config if isinstance(config, SyncConfig) else SyncConfig.model_validate(config)
            self.normalizer = Normalizer(self.config.chamber.value, self.config.term)
            outcome = await self._stages()
            result = self._result(outcome)
        except PipelineCancelled as e:
            self.log(f"Sync aborted: {e}")
            result = self._result(PipelineOutcome.ABORTED, error=str(e))
        except Exception as e:
            logger.error(f"Sync failed: {e}", exc_info=True)
            if self.callbacks.on_error:
                self.callbacks.on_error(e)
            result = self._result(PipelineOutcome.FAILED, error=str(e))

        logger.info(
            f"Sync finished: outcome={result.outcome.value}, counts={result.counts}, "
            f"issues={len(result.issues)}, elapsed={result.elapsed_seconds:.1f}s"
        )
        if self.callbacks.on_complete:
            self.callbacks.on_complete(result)
        return result

    async def _stages(self) -> PipelineOutcome:
        config = self.config
        chamber = config.chamber.value

        self.stage(1, "Init DB", 0.0)
        if self.database.session_factory is None:
            await self.database.initialize()
        await self.database.create_tables()

        self.stage(2, "Check Cache", 2.0)
        async with self.database.session() as session:
            state = await SyncMetadataRepository(session).load_state(chamber, config.term)
            cached = [
                SittingTarget(number=row.number, dates=row.dates or [])
                for row in await SittingRepository(session).list_for_term(chamber, config.term)
            ]
            roster = await MemberRepository(session).list_for_term(chamber, config.term)
        self.normalizer.set_roster(roster)
        self.plan = self.pipeline.planner.plan(config, state, cached, self.now)

        if self.plan.is_empty:
            self.log("Nothing to fetch: store is up to date")
            return PipelineOutcome.UP_TO_DATE

        transport = SejmTransport(self.pipeline.settings.api, client=self.pipeline.client, metrics=self.metrics)
        async with transport:
            adapters = build_adapters(transport, config.chamber)

            self.stage(3, "Resolve Target Sittings", 5.0)
            targets = self.plan.sittings_to_fetch
            if targets is None:
                sittings = await self._refresh_sitting_list(adapters[ResourceKind.SITTINGS])
                targets = self.pipeline.planner.select_targets(config, state, sittings, self.now)
                self.plan = self.plan.model_copy(update={"sittings_to_fetch": targets})
            self.log(f"Target sittings: {[t.number for t in targets] or 'none'}")

            self.stage(4, "Filter Per-Term Modules", 8.0)
            self.log(f"Per-term modules: {[k.value for k in self.plan.term_modules] or 'none'}")

            kinds = self._fetch_kinds(targets)
            if not kinds:
                self.log("Nothing to fetch after resolving sittings: store is up to date")
                return PipelineOutcome.UP_TO_DATE

            self.stage(5, "Fetch", FETCH_PROGRESS_START)
            stored_votings, stored_sessions = await self._stored_progress(kinds, targets)
            context = FetchContext(
                term=config.term,
                chamber=config.chamber,
                speed=config.speed,
                sittings=targets,
                committee_codes=config.committee_codes,
                member_ids=[r.person_id for r in roster],
                enacted_acts_publisher=config.enacted_acts_publisher,
                enacted_acts_year=config.enacted_acts_year,
                stored_ballot_votings=stored_votings,
                stored_committee_sessions=stored_sessions,
                cancel_token=self.token,
            )
            orchestrator = FetchOrchestrator(
                adapters,
                on_progress=self._on_fetch_progress,
                on_task_complete=self._persist_task,
                metrics=self.metrics,
            )
            await orchestrator.run(kinds, context)

        self.stage(6, "Update Sync Metadata", FETCH_PROGRESS_END)
        async with self.database.session() as session:
            await SyncMetadataRepository(session).record_run(
                chamber,
                config.term,
                plan=self.plan.model_dump(mode="json"),
                config=config.model_dump(mode="json"),
                stats={
                    "counts": self.counts,
                    "fetched": self.fetched,
                    "issues": len(self.issues),
                    "finished_at": self.now.isoformat(),
                },
            )

        self.stage(7, "Report", 100.0)
        return PipelineOutcome.SUCCESS

    def _fetch_kinds(self, targets: List[SittingTarget]) -> List[ResourceKind]:
        kinds: List[ResourceKind] = []
        if self.plan.must_fetch_members:
            kinds.append(ResourceKind.MEMBERS)
        wanted = {kind for target in targets for kind in target.kinds}
        kinds.extend(kind for kind in SITTING_KINDS if kind in wanted)
        kinds.extend(self.plan.term_modules)
        return kinds

    async def _stored_progress(
        self,
        kinds: List[ResourceKind],
        targets: List[SittingTarget],
    ) -> Tuple[Set[Tuple[int, int]], Set[Tuple[str, int]]]:
        """
        Votings and committee sessions whose rows are already stored, so a
        capped task resumes where an earlier run stopped. Empty when forced.
        """
        if self.config.force:
            return set(), set()

        chamber = self.config.chamber.value
        term = self.config.term
        votings: Set[Tuple[int, int]] = set()
        sessions: Set[Tuple[str, int]] = set()
        async with self.database.session() as session:
            if ResourceKind.BALLOTS in kinds:
                votings = await VotingRepository(session).numbers_with_ballots(
                    chamber, term, [t.number for t in targets]
                )
            if ResourceKind.COMMITTEE_STATEMENTS in kinds:
                sessions = await CommitteeSessionRepository(session).numbers_with_statements(chamber, term)
        return votings, sessions

    async def _refresh_sitting_list(self, adapter) -> List[SittingTarget]:
        config = self.config
        response = await adapter.fetch(FetchContext(
            term=config.term, chamber=config.chamber, speed=config.speed, cancel_token=self.token,
        ))
        if response.status == FetchStatus.FAILURE:
            message = response.issues[0].message if response.issues else "no data"
            raise PipelineError(f"Sitting list unavailable: {message}")

        await self._store(ResourceKind.SITTINGS, response)
        async with self.database.session() as session:
            await SyncMetadataRepository(session).mark_sitting_list_fetched(
                config.chamber.value, config.term, self.now
            )
            rows = await SittingRepository(session).list_for_term(config.chamber.value, config.term)
        self.log(f"Sitting list refreshed: {len(rows)} sittings")
        return [SittingTarget(number=row.number, dates=row.dates or []) for row in rows]

    async def _store(self, kind: ResourceKind, response: FetchResponse) -> Dict[str, int]:
        records = response.data
        self.fetched[kind.value] = self.fetched.get(kind.value, 0) + len(records)
        self.issues.extend(response.issues)
        if self.config.privacy_filter:
            records = apply_privacy_filter(kind, records)

        async with self.database.session() as session:
            counts = await self.normalizer.persist(session, kind, records)
            await self._mark_fetched(session, kind, response)

        for table, count in counts.items():
            self.counts[table] = self.counts.get(table, 0) + count
        return counts

    async def _persist_task(self, kind: ResourceKind, response: FetchResponse) -> None:
        counts = await self._store(kind, response)
        self.log(f"{kind.value}: {len(response.data)} fetched, {sum(counts.values())} rows written")

    async def _mark_fetched(self, session, kind: ResourceKind, response: FetchResponse) -> None:
        """Record in the same transaction what the persisted task covered."""
        config = self.config
        chamber = config.chamber.value
        metadata = SyncMetadataRepository(session)

        if kind == ResourceKind.MEMBERS:
            if response.status != FetchStatus.FAILURE:
                await metadata.mark_members_fetched(chamber, config.term, self.now)
        elif kind in SITTING_KINDS:
            failed = {
                issue.context.get("sitting")
                for issue in response.issues
                if issue.context.get("sitting") is not None
            }
            fetched = {
                target.number: [kind]
                for target in self.plan.sittings_to_fetch or []
                if kind in target.kinds and target.settled and target.number not in failed
            }
            if fetched and response.status != FetchStatus.FAILURE:
                await metadata.mark_sittings_fetched(chamber, config.term, fetched)
        elif (
            kind != ResourceKind.SITTINGS
            and response.status != FetchStatus.FAILURE
            and not any(issue.deferred for issue in response.issues)
        ):
            await metadata.mark_term_modules_fetched(chamber, config.term, [kind], self.now)

    def _on_fetch_progress(self, pct: float, label: str, metrics: RequestMetrics) -> None:
        span = FETCH_PROGRESS_END - FETCH_PROGRESS_START
        self.progress(FETCH_PROGRESS_START + pct / 100 * span, label)

    def _result(self, outcome: PipelineOutcome, error: Optional[str] = None) -> PipelineResult:
        return PipelineResult(
            outcome=outcome,
            counts=dict(self.counts),
            fetched=dict(self.fetched),
            speaker_stats=self.normalizer.speaker_stats.as_dict() if self.normalizer else {},
            elapsed_seconds=time.monotonic() - self.started,
            issues=list(self.issues),
            error=error,
            plan=self.plan,
            requests=self.metrics.snapshot().model_dump(),
        )
