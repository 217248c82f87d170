"""
Repository for sync metadata.

Small JSON key/value records describing what has been fetched, per
chamber and term. The planner reads only this (plus the cached sitting
list) before any network call.

Fetched-sitting sets are merge-only: kinds recorded for a sitting are
never removed except through clear().
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.sync_models import ResourceKind, SyncState
from ..models import SyncMetadataModel, utcnow

logger = logging.getLogger(__name__)

MEMBERS_FETCHED_AT = "members_fetched_at"
SITTING_LIST_FETCHED_AT = "sitting_list_fetched_at"
FETCHED_SITTINGS = "fetched_sittings"
TERM_MODULES_FETCHED_AT = "term_modules_fetched_at"
LAST_PLAN = "last_plan"
LAST_CONFIG = "last_config"
LAST_STATS = "last_stats"


def scope_prefix(chamber: str, term: int) -> str:
    return f"{chamber}:term{term}:"


class SyncMetadataRepository:
    """Repository for sync metadata records."""

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: Async database session
        """
        self.session = session

    async def get(self, key: str, default: Any = None) -> Any:
        row = await self.session.get(SyncMetadataModel, key)
        return default if row is None else row.value

    async def set(self, key: str, value: Any) -> None:
        """Insert or replace one JSON value."""
        stmt = insert(SyncMetadataModel).values(key=key, value=value, updated_at=utcnow())
        stmt = stmt.on_conflict_do_update(
            index_elements=["key"],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )
        await self.session.execute(stmt)

    async def load_state(self, chamber: str, term: int) -> SyncState:
        """
        Read the sync state of one chamber and term.

        Returns:
            SyncState (empty when nothing was ever fetched)
        """
        prefix = scope_prefix(chamber, term)
        return SyncState(
            members_fetched_at=await self.get(prefix + MEMBERS_FETCHED_AT),
            sitting_list_fetched_at=await self.get(prefix + SITTING_LIST_FETCHED_AT),
            fetched_sittings=await self.get(prefix + FETCHED_SITTINGS, {}),
            term_modules_fetched_at=await self.get(prefix + TERM_MODULES_FETCHED_AT, {}),
        )

    async def mark_sittings_fetched(
        self,
        chamber: str,
        term: int,
        fetched: Dict[int, Iterable[ResourceKind]],
    ) -> Dict[str, List[str]]:
        """
        Merge newly fetched kinds into the per-sitting record.

        Args:
            fetched: sitting number -> kinds fetched for it in this run

        Returns:
            The merged record as stored
        """
        key = scope_prefix(chamber, term) + FETCHED_SITTINGS
        current: Dict[str, List[str]] = dict(await self.get(key, {}) or {})

        for number, kinds in fetched.items():
            merged = set(current.get(str(number), []))
            merged.update(ResourceKind(k).value for k in kinds)
            current[str(number)] = sorted(merged)

        await self.set(key, current)
        logger.debug(f"Marked {len(fetched)} sittings fetched for {chamber} term {term}")
        return current

    async def mark_members_fetched(self, chamber: str, term: int, at: datetime) -> None:
        await self.set(scope_prefix(chamber, term) + MEMBERS_FETCHED_AT, at.isoformat())

    async def mark_sitting_list_fetched(self, chamber: str, term: int, at: datetime) -> None:
        await self.set(scope_prefix(chamber, term) + SITTING_LIST_FETCHED_AT, at.isoformat())

    async def mark_term_modules_fetched(
        self,
        chamber: str,
        term: int,
        kinds: Iterable[ResourceKind],
        at: datetime,
    ) -> None:
        key = scope_prefix(chamber, term) + TERM_MODULES_FETCHED_AT
        current: Dict[str, str] = dict(await self.get(key, {}) or {})
        for kind in kinds:
            current[ResourceKind(kind).value] = at.isoformat()
        await self.set(key, current)

    async def record_run(
        self,
        chamber: str,
        term: int,
        plan: Optional[Dict[str, Any]],
        config: Dict[str, Any],
        stats: Dict[str, Any],
    ) -> None:
        """Store the last plan, run configuration and result statistics."""
        prefix = scope_prefix(chamber, term)
        await self.set(prefix + LAST_PLAN, plan)
        await self.set(prefix + LAST_CONFIG, config)
        await self.set(prefix + LAST_STATS, stats)

    async def clear(self, chamber: Optional[str] = None, term: Optional[int] = None) -> int:
        """
        Delete sync metadata, forcing the next run to fetch everything.

        Args:
            chamber: Limit to one chamber (all chambers if None)
            term: Limit to one term; requires chamber

        Returns:
            Number of records deleted
        """
        stmt = delete(SyncMetadataModel)
        if chamber and term is not None:
            stmt = stmt.where(SyncMetadataModel.key.startswith(scope_prefix(chamber, term)))
        elif chamber:
            stmt = stmt.where(SyncMetadataModel.key.startswith(f"{chamber}:"))

        result = await self.session.execute(stmt)
        logger.info(f"Cleared {result.rowcount} sync metadata records")
        return result.rowcount
