"""
Normalizer: raw records per resource kind -> validated rows -> upserts.

Each kind maps to one pure normalize function and one repository.
Normalization follows entity dependency order (members and sittings
before their children), so parents are written before children.

Responsibility: Dispatch raw batches to normalizers and repositories
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.repositories import (
    BallotRepository,
    CommitteeRepository,
    CommitteeSessionRepository,
    CommitteeStatementRepository,
    EnactedActRepository,
    FinancialDisclosureRepository,
    InterpellationRepository,
    LegislativeDraftRepository,
    MemberRepository,
    SittingRepository,
    StatementRepository,
    UpsertRepository,
    VotingRepository,
    WrittenQuestionReplyRepository,
    WrittenQuestionRepository,
)
from ..models.fetch_models import RawRecord
from ..models.sync_models import ResourceKind
from .base import NormalizeContext
from .committees import (
    normalize_committee,
    normalize_committee_session,
    normalize_committee_statement,
)
from .documents import (
    normalize_enacted_act,
    normalize_financial_disclosure,
    normalize_interpellation,
    normalize_legislative_draft,
    normalize_written_question,
    normalize_written_question_replies,
)
from .members import normalize_member, normalize_senator
from .sittings import normalize_sitting, normalize_statement
from .speakers import SpeakerResolver, SpeakerStats
from .votes import normalize_ballot, normalize_voting

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KindSpec:
    normalize: Callable[[RawRecord, NormalizeContext], Optional[BaseModel]]
    repository: Type[UpsertRepository]

    @property
    def table(self) -> str:
        return self.repository.model.__tablename__


KIND_SPECS: Dict[ResourceKind, KindSpec] = {
    ResourceKind.MEMBERS: KindSpec(normalize_member, MemberRepository),
    ResourceKind.SITTINGS: KindSpec(normalize_sitting, SittingRepository),
    ResourceKind.STATEMENTS: KindSpec(normalize_statement, StatementRepository),
    ResourceKind.VOTINGS: KindSpec(normalize_voting, VotingRepository),
    ResourceKind.BALLOTS: KindSpec(normalize_ballot, BallotRepository),
    ResourceKind.COMMITTEES: KindSpec(normalize_committee, CommitteeRepository),
    ResourceKind.COMMITTEE_SESSIONS: KindSpec(normalize_committee_session, CommitteeSessionRepository),
    ResourceKind.COMMITTEE_STATEMENTS: KindSpec(normalize_committee_statement, CommitteeStatementRepository),
    ResourceKind.INTERPELLATIONS: KindSpec(normalize_interpellation, InterpellationRepository),
    ResourceKind.WRITTEN_QUESTIONS: KindSpec(normalize_written_question, WrittenQuestionRepository),
    ResourceKind.LEGISLATIVE_DRAFTS: KindSpec(normalize_legislative_draft, LegislativeDraftRepository),
    ResourceKind.ENACTED_ACTS: KindSpec(normalize_enacted_act, EnactedActRepository),
    ResourceKind.FINANCIAL_DISCLOSURES: KindSpec(normalize_financial_disclosure, FinancialDisclosureRepository),
}


class Normalizer:
    """
    Example:
        normalizer = Normalizer("sejm", 10, roster=members)
        async with db.session() as session:
            counts = await normalizer.persist(session, ResourceKind.VOTINGS, raw_votings)
        # counts == {"votings": 42}
    """

    def __init__(self, chamber: str, term: int, roster: Iterable[Any] = ()):
        self.context = NormalizeContext(chamber, term, SpeakerResolver(roster))

    @property
    def speaker_stats(self) -> SpeakerStats:
        return self.context.speakers.stats

    def set_roster(self, roster: Iterable[Any]) -> None:
        """Replace the member roster used for speaker resolution, keeping statistics."""
        stats = self.context.speakers.stats
        self.context.speakers = SpeakerResolver(roster)
        self.context.speakers.stats = stats

    def normalize(self, kind: ResourceKind, records: Iterable[RawRecord]) -> Dict[str, List[BaseModel]]:
        """
        Map raw records of one kind to rows, grouped by table.

        Records the normalizer rejects (missing key fields, placeholder
        sittings, unknown vote values) produce no row.
        """
        spec = KIND_SPECS[kind]
        records = list(records)
        rows: List[BaseModel] = []
        for raw in records:
            row = spec.normalize(raw, self.context)
            if row is not None:
                rows.append(row)

        rejected = len(records) - len(rows)
        if rejected:
            logger.debug(f"{kind.value}: {rejected} of {len(records)} records produced no row")

        tables: Dict[str, List[BaseModel]] = {spec.table: rows}
        if kind == ResourceKind.WRITTEN_QUESTIONS:
            replies = [r for raw in records for r in normalize_written_question_replies(raw, self.context)]
            tables[WrittenQuestionReplyRepository.model.__tablename__] = replies
        if kind == ResourceKind.BALLOTS:
            senators = [normalize_senator(raw, self.context) for raw in records if raw.get("senator")]
            if senators:
                tables[MemberRepository.model.__tablename__] = [s for s in senators if s is not None]
        return tables

    async def persist(
        self,
        session: AsyncSession,
        kind: ResourceKind,
        records: Iterable[RawRecord],
    ) -> Dict[str, int]:
        """
        Normalize and upsert one kind's records.

        Returns:
            Rows written per table
        """
        tables = self.normalize(kind, records)
        counts: Dict[str, int] = {}

        for table, rows in tables.items():
            repository = _repository_for(table)(session)
            counts[table] = await repository.upsert_many(
                [row.model_dump(mode="json") for row in rows]
            )

        if kind == ResourceKind.MEMBERS and tables[KIND_SPECS[kind].table]:
            self.set_roster(tables[KIND_SPECS[kind].table])

        logger.info(f"Persisted {kind.value}: {counts}")
        return counts


def _repository_for(table: str) -> Type[UpsertRepository]:
    if table == WrittenQuestionReplyRepository.model.__tablename__:
        return WrittenQuestionReplyRepository
    for spec in KIND_SPECS.values():
        if spec.table == table:
            return spec.repository
    raise KeyError(table)
