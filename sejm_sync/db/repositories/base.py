"""
Base repository with idempotent batch upsert.

Every entity table has a single natural primary key, so one
INSERT ... ON CONFLICT(pk) DO UPDATE statement covers all of them:
on conflict, every non-key column is overwritten (last-write-wins) and
created_at is preserved.
"""

import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ...utils.dedupe import dedupe_by_key
from ..models import Base, utcnow

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# Stay under SQLite's bound-parameter limit on older builds (999)
MAX_PARAMS_PER_STATEMENT = 900


class UpsertRepository(Generic[ModelT]):
    """Repository base for one natural-keyed table."""

    model: Type[ModelT]

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: Async database session
        """
        self.session = session

    @property
    def primary_key(self) -> str:
        return self.model.__table__.primary_key.columns.values()[0].name

    async def upsert_many(self, rows: List[Dict[str, Any]]) -> int:
        """
        Batch insert or update rows keyed by the primary key.

        Args:
            rows: Column dictionaries (all with the same keys)

        Returns:
            Number of distinct keys written
        """
        if not rows:
            return 0

        pk = self.primary_key
        rows, duplicates = dedupe_by_key(rows, lambda r: r.get(pk))
        if duplicates:
            logger.debug(f"Collapsed {duplicates} duplicate {self.model.__tablename__} rows")

        now = utcnow()
        prepared = [{"created_at": now, "updated_at": now, **row} for row in rows]
        if "created_at" not in self.model.__table__.columns:
            prepared = [{k: v for k, v in row.items() if k != "created_at"} for row in prepared]

        columns = len(prepared[0])
        chunk_size = max(1, MAX_PARAMS_PER_STATEMENT // max(columns, 1))

        for start in range(0, len(prepared), chunk_size):
            chunk = prepared[start:start + chunk_size]
            stmt = insert(self.model).values(chunk)
            update_dict = {
                col.name: stmt.excluded[col.name]
                for col in self.model.__table__.columns
                if col.name not in (pk, "created_at") and col.name in chunk[0]
            }
            stmt = stmt.on_conflict_do_update(
                index_elements=[pk],
                set_=update_dict
            )
            await self.session.execute(stmt)

        logger.debug(f"Upserted {len(prepared)} rows into {self.model.__tablename__}")
        return len(prepared)

    async def get(self, key: str) -> Optional[ModelT]:
        """Get one row by natural key."""
        return await self.session.get(self.model, key)

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(self.model)
        )
        return int(result.scalar_one())
