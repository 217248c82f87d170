"""
Repository package for data access operations.

One upsert repository per entity table, plus sync metadata.
"""

from .base import UpsertRepository
from .committee_repository import (
    CommitteeRepository,
    CommitteeSessionRepository,
    CommitteeStatementRepository,
)
from .document_repository import (
    EnactedActRepository,
    FinancialDisclosureRepository,
    InterpellationRepository,
    LegislativeDraftRepository,
    WrittenQuestionReplyRepository,
    WrittenQuestionRepository,
)
from .member_repository import MemberRepository
from .sitting_repository import SittingRepository, StatementRepository
from .sync_metadata_repository import SyncMetadataRepository
from .vote_repository import BallotRepository, VotingRepository

__all__ = [
    "UpsertRepository",
    "MemberRepository",
    "SittingRepository",
    "StatementRepository",
    "VotingRepository",
    "BallotRepository",
    "CommitteeRepository",
    "CommitteeSessionRepository",
    "CommitteeStatementRepository",
    "InterpellationRepository",
    "WrittenQuestionRepository",
    "WrittenQuestionReplyRepository",
    "LegislativeDraftRepository",
    "EnactedActRepository",
    "FinancialDisclosureRepository",
    "SyncMetadataRepository",
]
