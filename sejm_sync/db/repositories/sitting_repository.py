"""
Repository for sittings and transcript statements.
"""

from typing import List

from sqlalchemy import select

from ..models import SittingModel, StatementModel
from .base import UpsertRepository


class SittingRepository(UpsertRepository[SittingModel]):
    """Repository for sitting database operations."""

    model = SittingModel

    async def list_for_term(self, chamber: str, term: int) -> List[SittingModel]:
        """
        Get the cached sitting list of one chamber and term.

        Returns:
            List of SittingModel ordered by sitting number
        """
        result = await self.session.execute(
            select(SittingModel)
            .where(SittingModel.chamber == chamber, SittingModel.term == term)
            .order_by(SittingModel.number)
        )
        return list(result.scalars().all())


class StatementRepository(UpsertRepository[StatementModel]):
    """Repository for transcript statements."""

    model = StatementModel
