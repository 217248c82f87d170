"""
Repositories for committees, their sessions and session statements.
"""

from typing import Set, Tuple

from sqlalchemy import select

from ..models import CommitteeModel, CommitteeSessionModel, CommitteeStatementModel
from .base import UpsertRepository


class CommitteeRepository(UpsertRepository[CommitteeModel]):
    model = CommitteeModel


class CommitteeSessionRepository(UpsertRepository[CommitteeSessionModel]):
    model = CommitteeSessionModel

    async def numbers_with_statements(self, chamber: str, term: int) -> Set[Tuple[str, int]]:
        """
        Find sessions of one term whose transcript statements are stored.

        Returns:
            Set of (committee code, session number)
        """
        result = await self.session.execute(
            select(CommitteeSessionModel.committee_code, CommitteeSessionModel.number)
            .join(
                CommitteeStatementModel,
                CommitteeStatementModel.session_id == CommitteeSessionModel.session_id,
            )
            .where(CommitteeSessionModel.committee_id.startswith(f"{chamber}_{term}_", autoescape=True))
            .distinct()
        )
        return {(row.committee_code, row.number) for row in result}


class CommitteeStatementRepository(UpsertRepository[CommitteeStatementModel]):
    model = CommitteeStatementModel
