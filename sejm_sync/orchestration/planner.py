"""
Sync planner: computes what a run must fetch.

Pure decision logic over the request, persisted sync state and the
cached sitting list. Performs no I/O, so a plan is re-derivable from
sync metadata and the current request alone.

Rules:
- Members and the sitting list are cached with separate TTLs
  (members 7 days, sitting list 1 day); absent or stale means refetch.
- Target sittings are the most recent N valid sittings, or the custom
  [from, to] range. Placeholders (number <= 0) and sittings that have not
  finished yet (any date after today) are never targeted, so a sitting is
  only marked fetched once all of its days have happened.
- A sitting listed without dates (Senate) cannot be checked against
  today: the newest such sitting is targeted but left unsettled, so it is
  refetched until a later sitting is published.
- Members are only planned for the Sejm; Senate ballots carry senators.
- A target sitting is included when never fetched, or re-included scoped
  to the data kinds it lacks.
- Per-term modules are skipped when fetched within their TTL.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Sequence
import logging

from ..config import CacheConfig, settings
from ..models.sync_models import (
    PREREQUISITES,
    SITTING_KINDS,
    Chamber,
    FetchPlan,
    ResourceKind,
    SittingTarget,
    SyncConfig,
    SyncState,
)

logger = logging.getLogger(__name__)


def _is_stale(fetched_at: Optional[datetime], ttl: timedelta, now: datetime) -> bool:
    return fetched_at is None or now - fetched_at >= ttl


class SyncPlanner:
    """
    Example:
        planner = SyncPlanner()
        plan = planner.plan(config, state, cached_sittings, datetime.now(UTC))
        if plan.sittings_to_fetch is None:
            # refresh the sitting list, then
            targets = planner.select_targets(config, state, fresh_sittings, now)
    """

    def __init__(self, cache_config: Optional[CacheConfig] = None):
        self.cache_config = cache_config or settings.cache

    @property
    def members_ttl(self) -> timedelta:
        return timedelta(days=self.cache_config.members_ttl_days)

    @property
    def sitting_list_ttl(self) -> timedelta:
        return timedelta(hours=self.cache_config.sitting_list_ttl_hours)

    @property
    def term_module_ttl(self) -> timedelta:
        return timedelta(hours=self.cache_config.term_module_ttl_hours)

    def plan(
        self,
        config: SyncConfig,
        state: SyncState,
        cached_sittings: Optional[Sequence[SittingTarget]],
        now: datetime,
    ) -> FetchPlan:
        """
        Compute the delta between the request and what is already fetched.

        Args:
            config: Requested modules, range and flags
            state: Sync metadata for the config's chamber and term
            cached_sittings: Sitting list from the store (number + dates)
            now: Current time (timezone-aware)

        Returns:
            FetchPlan; sittings_to_fetch is None when the sitting list
            must be refreshed first
        """
        first_run = not state.has_metadata
        wants_sittings = bool(config.sitting_kinds())

        must_fetch_members = config.chamber == Chamber.SEJM and (
            first_run or config.force or _is_stale(state.members_fetched_at, self.members_ttl, now)
        )
        must_fetch_sitting_list = wants_sittings and (
            first_run
            or config.force
            or not cached_sittings
            or _is_stale(state.sitting_list_fetched_at, self.sitting_list_ttl, now)
        )

        sittings_to_fetch: Optional[List[SittingTarget]] = None
        if not must_fetch_sitting_list:
            sittings_to_fetch = (
                self.select_targets(config, state, cached_sittings or [], now)
                if wants_sittings else []
            )

        plan = FetchPlan(
            must_fetch_members=must_fetch_members,
            must_fetch_sitting_list=must_fetch_sitting_list,
            sittings_to_fetch=sittings_to_fetch,
            term_modules=self.filter_term_modules(config, state, now),
        )
        logger.info(
            f"Plan: members={plan.must_fetch_members}, "
            f"sitting_list={plan.must_fetch_sitting_list}, "
            f"sittings={None if sittings_to_fetch is None else [s.number for s in sittings_to_fetch]}, "
            f"term_modules={[k.value for k in plan.term_modules]}"
        )
        return plan

    def select_targets(
        self,
        config: SyncConfig,
        state: SyncState,
        sittings: Sequence[SittingTarget],
        now: datetime,
    ) -> List[SittingTarget]:
        """
        Resolve the target sittings and scope each to its missing kinds.
        """
        today = now.date().isoformat()
        valid = sorted(
            (s for s in sittings if s.number > 0 and not (s.dates and max(s.dates) > today)),
            key=lambda s: s.number,
        )

        selector = config.range
        if selector.mode == "last":
            targets = valid[-selector.last:]
        else:
            targets = [
                s for s in valid
                if selector.from_number <= s.number <= selector.to_number
            ]

        newest = valid[-1].number if valid else None
        wanted = config.sitting_kinds()
        delta: List[SittingTarget] = []
        for sitting in targets:
            have = set(state.fetched_sittings.get(sitting.number, []))
            missing_set = {k for k in wanted if config.force or k not in have}
            if ResourceKind.BALLOTS in missing_set:
                # ballots are fetched from the sitting's voting list
                missing_set.add(ResourceKind.VOTINGS)
            missing = [k for k in SITTING_KINDS if k in missing_set]
            if missing:
                delta.append(SittingTarget(
                    number=sitting.number,
                    dates=sitting.dates,
                    kinds=missing,
                    settled=bool(sitting.dates) or sitting.number != newest,
                ))

        return delta

    def filter_term_modules(
        self,
        config: SyncConfig,
        state: SyncState,
        now: datetime,
    ) -> List[ResourceKind]:
        """
        Requested per-term modules that are not fresh, plus the cascade
        prerequisites whose data they need within this run.
        """
        requested = config.term_kinds()
        selected = {
            kind for kind in requested
            if config.force or _is_stale(
                state.term_modules_fetched_at.get(kind), self.term_module_ttl, now
            )
        }

        changed = True
        while changed:
            changed = False
            for kind in list(selected):
                parent = PREREQUISITES.get(kind)
                if parent in requested and parent not in selected:
                    selected.add(parent)
                    changed = True

        return [kind for kind in requested if kind in selected]
