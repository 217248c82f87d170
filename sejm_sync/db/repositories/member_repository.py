"""
Repository for member database operations.

Besides upserts, supplies the roster used for speaker resolution and the
member ids used to fetch financial disclosures from a cached roster.
"""

from typing import List

from sqlalchemy import select

from ..models import MemberModel
from .base import UpsertRepository


class MemberRepository(UpsertRepository[MemberModel]):
    """Repository for member database operations."""

    model = MemberModel

    async def list_for_term(self, chamber: str, term: int) -> List[MemberModel]:
        """
        Get the roster of one chamber and term.

        Args:
            chamber: sejm or senat
            term: Term number

        Returns:
            List of MemberModel ordered by surname
        """
        result = await self.session.execute(
            select(MemberModel)
            .where(MemberModel.chamber == chamber, MemberModel.term == term)
            .order_by(MemberModel.last_name, MemberModel.first_name)
        )
        return list(result.scalars().all())
