"""
Sync run models: requested modules, plans, persisted sync state and results.

Responsibility: Typed contracts between the CLI, planner, orchestrator and pipeline
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .fetch_models import FetchIssue


class ResourceKind(str, Enum):
    """Logical upstream resource, one adapter and one normalizer each"""
    MEMBERS = "members"
    SITTINGS = "sittings"
    STATEMENTS = "statements"
    VOTINGS = "votings"
    BALLOTS = "ballots"
    COMMITTEES = "committees"
    COMMITTEE_SESSIONS = "committee_sessions"
    COMMITTEE_STATEMENTS = "committee_statements"
    INTERPELLATIONS = "interpellations"
    WRITTEN_QUESTIONS = "written_questions"
    LEGISLATIVE_DRAFTS = "legislative_drafts"
    ENACTED_ACTS = "enacted_acts"
    FINANCIAL_DISCLOSURES = "financial_disclosures"


# Kinds fetched per target sitting; sync metadata records them per sitting
SITTING_KINDS = (
    ResourceKind.STATEMENTS,
    ResourceKind.VOTINGS,
    ResourceKind.BALLOTS,
)

# Kinds published for the Senate (votings catalog with per-voting CSV files)
SENATE_KINDS = (
    ResourceKind.VOTINGS,
    ResourceKind.BALLOTS,
)

# Kinds fetched once for the whole term
TERM_MODULE_KINDS = (
    ResourceKind.COMMITTEES,
    ResourceKind.COMMITTEE_SESSIONS,
    ResourceKind.COMMITTEE_STATEMENTS,
    ResourceKind.INTERPELLATIONS,
    ResourceKind.WRITTEN_QUESTIONS,
    ResourceKind.LEGISLATIVE_DRAFTS,
    ResourceKind.ENACTED_ACTS,
    ResourceKind.FINANCIAL_DISCLOSURES,
)

# Task order used by the orchestrator and the normalizer: parents first
KIND_ORDER = (
    ResourceKind.MEMBERS,
    ResourceKind.SITTINGS,
    ResourceKind.COMMITTEES,
    ResourceKind.COMMITTEE_SESSIONS,
    ResourceKind.COMMITTEE_STATEMENTS,
    ResourceKind.STATEMENTS,
    ResourceKind.VOTINGS,
    ResourceKind.BALLOTS,
    ResourceKind.INTERPELLATIONS,
    ResourceKind.WRITTEN_QUESTIONS,
    ResourceKind.LEGISLATIVE_DRAFTS,
    ResourceKind.ENACTED_ACTS,
    ResourceKind.FINANCIAL_DISCLOSURES,
)

# kind -> kind whose data it needs
PREREQUISITES: Dict[ResourceKind, ResourceKind] = {
    ResourceKind.BALLOTS: ResourceKind.VOTINGS,
    ResourceKind.COMMITTEE_SESSIONS: ResourceKind.COMMITTEES,
    ResourceKind.COMMITTEE_STATEMENTS: ResourceKind.COMMITTEE_SESSIONS,
    ResourceKind.FINANCIAL_DISCLOSURES: ResourceKind.MEMBERS,
}


class Chamber(str, Enum):
    SEJM = "sejm"
    SENAT = "senat"


class SpeedProfile(str, Enum):
    """Named transcript batching profile, see utils.pacing"""
    NORMAL = "normal"
    FAST = "fast"
    RISKY = "risky"


class RangeSelector(BaseModel):
    """
    Which sittings a run targets.

    ``last``: the most recent N valid sittings.
    ``custom``: every valid sitting numbered within [from_number, to_number].
    """
    mode: Literal["last", "custom"] = "last"
    last: Optional[int] = Field(default=None, ge=1)
    from_number: Optional[int] = Field(default=None, ge=1)
    to_number: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def check_bounds(self) -> "RangeSelector":
        if self.mode == "last" and self.last is None:
            raise ValueError("range 'last' requires a sitting count")
        if self.mode == "custom":
            if self.from_number is None or self.to_number is None:
                raise ValueError("range 'custom' requires from_number and to_number")
            if self.from_number > self.to_number:
                raise ValueError("from_number must not exceed to_number")
        return self

    @classmethod
    def last_n(cls, n: int) -> "RangeSelector":
        return cls(mode="last", last=n)

    @classmethod
    def custom(cls, from_number: int, to_number: int) -> "RangeSelector":
        return cls(mode="custom", from_number=from_number, to_number=to_number)


class SyncConfig(BaseModel):
    """
    One sync request: what to fetch, for which chamber/term and sittings.

    Raises pydantic.ValidationError on invalid input, which the pipeline
    reports as a fatal configuration error.
    """
    modules: List[ResourceKind] = Field(min_length=1)
    chamber: Chamber = Chamber.SEJM
    term: int = Field(default=10, ge=1)
    range: RangeSelector = Field(default_factory=lambda: RangeSelector.last_n(1))
    speed: SpeedProfile = SpeedProfile.NORMAL
    committee_codes: Optional[List[str]] = Field(
        default=None,
        description="Committee codes to cascade into; None means all"
    )
    enacted_acts_publisher: str = Field(default="DU")
    enacted_acts_year: Optional[int] = Field(default=None, ge=1918)
    privacy_filter: bool = True
    force: bool = False

    @field_validator("modules")
    @classmethod
    def reject_sittings_module(cls, v: List[ResourceKind]) -> List[ResourceKind]:
        # The sitting list is governed by the planner's TTL, not requested directly
        return [kind for kind in dict.fromkeys(v) if kind != ResourceKind.SITTINGS]

    @model_validator(mode="after")
    def check_chamber_modules(self) -> "SyncConfig":
        if self.chamber == Chamber.SENAT:
            unsupported = [kind.value for kind in self.modules if kind not in SENATE_KINDS]
            if unsupported:
                raise ValueError(
                    f"Senate sync covers votings and ballots only, not: {', '.join(unsupported)}"
                )
        return self

    def resolved_modules(self) -> List[ResourceKind]:
        """
        Requested modules plus their fetch prerequisites, in task order.

        Members are not added for financial disclosures: a cached roster
        can supply the member ids.
        """
        wanted = set(self.modules)
        changed = True
        while changed:
            changed = False
            for kind in list(wanted):
                parent = PREREQUISITES.get(kind)
                if parent and parent != ResourceKind.MEMBERS and parent not in wanted:
                    wanted.add(parent)
                    changed = True
        return [kind for kind in KIND_ORDER if kind in wanted]

    def sitting_kinds(self) -> List[ResourceKind]:
        resolved = self.resolved_modules()
        return [kind for kind in SITTING_KINDS if kind in resolved]

    def term_kinds(self) -> List[ResourceKind]:
        resolved = self.resolved_modules()
        return [kind for kind in TERM_MODULE_KINDS if kind in resolved]


class SittingTarget(BaseModel):
    """A sitting selected for fetching, scoped to the kinds it still lacks"""
    number: int
    dates: List[str] = Field(default_factory=list)
    kinds: List[ResourceKind] = Field(default_factory=list)
    settled: bool = Field(
        default=True,
        description="False while the sitting may still gain data; such targets are fetched but not marked"
    )


class FetchPlan(BaseModel):
    """
    Delta between the request and what sync metadata says is already fetched.

    ``sittings_to_fetch`` is None while the sitting list itself must be
    refreshed; the pipeline resolves it after the refresh.
    """
    must_fetch_members: bool
    must_fetch_sitting_list: bool
    sittings_to_fetch: Optional[List[SittingTarget]] = None
    term_modules: List[ResourceKind] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return (
            not self.must_fetch_members
            and not self.must_fetch_sitting_list
            and self.sittings_to_fetch is not None
            and not self.sittings_to_fetch
            and not self.term_modules
        )


class SyncState(BaseModel):
    """
    Sync metadata for one chamber and term, as read by the planner.
    """
    members_fetched_at: Optional[datetime] = None
    sitting_list_fetched_at: Optional[datetime] = None
    fetched_sittings: Dict[int, List[ResourceKind]] = Field(default_factory=dict)
    term_modules_fetched_at: Dict[ResourceKind, datetime] = Field(default_factory=dict)

    @property
    def has_metadata(self) -> bool:
        return bool(
            self.members_fetched_at
            or self.sitting_list_fetched_at
            or self.fetched_sittings
            or self.term_modules_fetched_at
        )


class PipelineOutcome(str, Enum):
    SUCCESS = "success"
    UP_TO_DATE = "up_to_date"
    ABORTED = "aborted"
    FAILED = "failed"


class PipelineResult(BaseModel):
    """
    Terminal report of one pipeline run, produced even on failure.
    """
    outcome: PipelineOutcome
    counts: Dict[str, int] = Field(
        default_factory=dict,
        description="Rows upserted per table"
    )
    fetched: Dict[str, int] = Field(
        default_factory=dict,
        description="Raw records fetched per resource kind"
    )
    speaker_stats: Dict[str, int] = Field(default_factory=dict)
    elapsed_seconds: float = 0.0
    issues: List[FetchIssue] = Field(default_factory=list)
    error: Optional[str] = None
    plan: Optional[FetchPlan] = None
    requests: Dict[str, Any] = Field(default_factory=dict)
