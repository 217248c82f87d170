"""
SQLAlchemy database models for sejm-sync.

ORM models mapping to SQLite tables. Every entity is keyed by a
deterministic natural id (never an autoincrement surrogate) so repeated
syncs merge into the same rows.

Responsibility: Define database schema and ORM mappings
"""

from datetime import datetime, UTC
from typing import Optional, List, Any, Dict
from sqlalchemy import (
    String, Integer, DateTime, Boolean, Text, JSON, Index,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class MemberModel(TimestampMixin, Base):
    """
    Database model for chamber members.

    Rows are upserted on every members fetch and never deleted.
    """

    __tablename__ = "members"

    person_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    chamber: Mapped[str] = mapped_column(String(10), nullable=False)
    term: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    second_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    club: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    district_num: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    district_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    voivodeship: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    profession: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    role: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<MemberModel(person_id={self.person_id}, name={self.full_name}, club={self.club})>"


class SittingModel(TimestampMixin, Base):
    """Database model for plenary sittings."""

    __tablename__ = "sittings"

    sitting_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    chamber: Mapped[str] = mapped_column(String(10), nullable=False)
    term: Mapped[int] = mapped_column(Integer, nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dates: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    first_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    last_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index('idx_sitting_term_number', 'chamber', 'term', 'number'),
    )

    def __repr__(self) -> str:
        return f"<SittingModel(sitting_id={self.sitting_id}, dates={self.dates})>"


class StatementModel(TimestampMixin, Base):
    """Database model for transcript statements."""

    __tablename__ = "statements"

    statement_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    sitting_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    chamber: Mapped[str] = mapped_column(String(10), nullable=False)
    term: Mapped[int] = mapped_column(Integer, nullable=False)
    sitting_number: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    transcript_index: Mapped[int] = mapped_column(Integer, nullable=False)
    fragment_index: Mapped[int] = mapped_column(Integer, nullable=False)
    speaker_label: Mapped[str] = mapped_column(Text, nullable=False)
    member_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    club: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<StatementModel(statement_id={self.statement_id}, member_id={self.member_id})>"


class VotingModel(TimestampMixin, Base):
    """Database model for roll-call votings."""

    __tablename__ = "votings"

    voting_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    sitting_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    chamber: Mapped[str] = mapped_column(String(10), nullable=False)
    term: Mapped[int] = mapped_column(Integer, nullable=False)
    sitting_number: Mapped[int] = mapped_column(Integer, nullable=False)
    voting_number: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    topic: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    kind: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    yes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    no: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    abstain: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    not_participating: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_voted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    result: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<VotingModel(voting_id={self.voting_id}, yes={self.yes}, no={self.no})>"


class BallotModel(TimestampMixin, Base):
    """Database model for individual member votes."""

    __tablename__ = "ballots"

    ballot_id: Mapped[str] = mapped_column(String(80), primary_key=True)
    voting_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    person_id: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    vote: Mapped[str] = mapped_column(String(10), nullable=False)
    club: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<BallotModel(ballot_id={self.ballot_id}, vote={self.vote})>"


class CommitteeModel(TimestampMixin, Base):
    """Database model for committees."""

    __tablename__ = "committees"

    committee_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    chamber: Mapped[str] = mapped_column(String(10), nullable=False)
    term: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    name_genitive: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    appointment_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    composition_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    scope: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<CommitteeModel(committee_id={self.committee_id}, name={self.name})>"


class CommitteeSessionModel(TimestampMixin, Base):
    """Database model for committee sessions."""

    __tablename__ = "committee_sessions"

    session_id: Mapped[str] = mapped_column(String(80), primary_key=True)
    committee_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    committee_code: Mapped[str] = mapped_column(String(20), nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    agenda: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    remote: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<CommitteeSessionModel(session_id={self.session_id}, date={self.date})>"


class CommitteeStatementModel(TimestampMixin, Base):
    """Database model for committee session statements."""

    __tablename__ = "committee_statements"

    statement_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    session_id: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    committee_id: Mapped[str] = mapped_column(String(50), nullable=False)
    fragment_index: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    speaker_label: Mapped[str] = mapped_column(Text, nullable=False)
    member_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    club: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<CommitteeStatementModel(statement_id={self.statement_id})>"


class InterpellationModel(TimestampMixin, Base):
    """Database model for interpellations."""

    __tablename__ = "interpellations"

    interpellation_id: Mapped[str] = mapped_column(String(30), primary_key=True)
    term: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    num: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    author_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    author_ids: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    recipients: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    receipt_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    sent_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    last_modified: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    reply_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<InterpellationModel(interpellation_id={self.interpellation_id}, status={self.status})>"


class WrittenQuestionModel(TimestampMixin, Base):
    """Database model for written questions."""

    __tablename__ = "written_questions"

    question_id: Mapped[str] = mapped_column(String(30), primary_key=True)
    term: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    num: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    author_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    author_ids: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    recipients: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    receipt_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    sent_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    last_modified: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    reply_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<WrittenQuestionModel(question_id={self.question_id}, status={self.status})>"


class WrittenQuestionReplyModel(TimestampMixin, Base):
    """Database model for replies to written questions."""

    __tablename__ = "written_question_replies"

    reply_id: Mapped[str] = mapped_column(String(80), primary_key=True)
    question_id: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    key: Mapped[str] = mapped_column(String(40), nullable=False)
    author: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    receipt_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    last_modified: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    only_attachment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    prolongation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<WrittenQuestionReplyModel(reply_id={self.reply_id})>"


class LegislativeDraftModel(TimestampMixin, Base):
    """Database model for parliamentary prints."""

    __tablename__ = "legislative_drafts"

    draft_id: Mapped[str] = mapped_column(String(30), primary_key=True)
    term: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    number: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    document_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    delivery_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    change_date: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    process_prints: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<LegislativeDraftModel(draft_id={self.draft_id})>"


class EnactedActModel(TimestampMixin, Base):
    """Database model for enacted acts (ELI)."""

    __tablename__ = "enacted_acts"

    act_id: Mapped[str] = mapped_column(String(30), primary_key=True)
    publisher: Mapped[str] = mapped_column(String(10), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    eli: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    promulgation: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    announcement_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    entry_into_force: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    def __repr__(self) -> str:
        return f"<EnactedActModel(act_id={self.act_id}, type={self.type})>"


class FinancialDisclosureModel(TimestampMixin, Base):
    """Database model for member asset declarations."""

    __tablename__ = "financial_disclosures"

    disclosure_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    person_id: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    index: Mapped[int] = mapped_column(Integer, nullable=False)
    submitted_on: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    kind: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    document_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    payload: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<FinancialDisclosureModel(disclosure_id={self.disclosure_id})>"


class SyncMetadataModel(Base):
    """
    Key/value sync bookkeeping (fetched sittings, freshness timestamps,
    last plan). Stored in the same file so it survives restarts and
    travels with exports.
    """

    __tablename__ = "sync_metadata"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<SyncMetadataModel(key={self.key})>"
