"""
Repository for votings and individual ballots.
"""

from typing import Iterable, List, Set, Tuple

from sqlalchemy import select

from ..models import BallotModel, VotingModel
from .base import UpsertRepository


class VotingRepository(UpsertRepository[VotingModel]):
    """Repository for voting database operations."""

    model = VotingModel

    async def list_for_sitting(self, sitting_id: str) -> List[VotingModel]:
        """
        Get all votings of one sitting.

        Returns:
            List of VotingModel ordered by voting number
        """
        result = await self.session.execute(
            select(VotingModel)
            .where(VotingModel.sitting_id == sitting_id)
            .order_by(VotingModel.voting_number)
        )
        return list(result.scalars().all())

    async def numbers_with_ballots(
        self,
        chamber: str,
        term: int,
        sittings: Iterable[int],
    ) -> Set[Tuple[int, int]]:
        """
        Find votings of the given sittings that already have ballots stored.

        Returns:
            Set of (sitting number, voting number)
        """
        sittings = list(sittings)
        if not sittings:
            return set()

        result = await self.session.execute(
            select(VotingModel.sitting_number, VotingModel.voting_number)
            .join(BallotModel, BallotModel.voting_id == VotingModel.voting_id)
            .where(
                VotingModel.chamber == chamber,
                VotingModel.term == term,
                VotingModel.sitting_number.in_(sittings),
            )
            .distinct()
        )
        return {(row.sitting_number, row.voting_number) for row in result}


class BallotRepository(UpsertRepository[BallotModel]):
    """Repository for ballot database operations."""

    model = BallotModel

    async def list_for_voting(self, voting_id: str) -> List[BallotModel]:
        result = await self.session.execute(
            select(BallotModel).where(BallotModel.voting_id == voting_id)
        )
        return list(result.scalars().all())
