"""
Resource adapters for the parliament open-data API.

One adapter per resource kind, all sharing a single SejmTransport.
"""

from typing import Dict

from ..models.sync_models import Chamber, ResourceKind
from .base_adapter import BaseAdapter, FetchContext
from .committees import CommitteesAdapter, CommitteeSessionsAdapter, CommitteeStatementsAdapter
from .enacted_acts import EnactedActsAdapter
from .financial_disclosures import FinancialDisclosuresAdapter
from .legislative_drafts import LegislativeDraftsAdapter
from .members import MembersAdapter
from .questions import InterpellationsAdapter, WrittenQuestionsAdapter
from .senate import (
    SenateBallotsAdapter,
    SenateCatalog,
    SenateSittingsAdapter,
    SenateVotingsAdapter,
)
from .sittings import SittingsAdapter
from .transcripts import TranscriptsAdapter, parse_transcript_html
from .transport import FetchError, SejmTransport
from .votings import BallotsAdapter, VotingsAdapter

ADAPTER_CLASSES = (
    MembersAdapter,
    SittingsAdapter,
    TranscriptsAdapter,
    VotingsAdapter,
    BallotsAdapter,
    CommitteesAdapter,
    CommitteeSessionsAdapter,
    CommitteeStatementsAdapter,
    InterpellationsAdapter,
    WrittenQuestionsAdapter,
    LegislativeDraftsAdapter,
    EnactedActsAdapter,
    FinancialDisclosuresAdapter,
)


def build_adapters(
    transport: SejmTransport,
    chamber: Chamber = Chamber.SEJM,
) -> Dict[ResourceKind, BaseAdapter]:
    """
    Instantiate every adapter on a shared transport, keyed by kind.

    The Senate publishes sittings, votings and ballots through its voting
    catalog, so those kinds get the catalog-backed adapters.
    """
    adapters = {cls.kind: cls(transport) for cls in ADAPTER_CLASSES}
    if chamber == Chamber.SENAT:
        catalog = SenateCatalog(transport)
        adapters[ResourceKind.SITTINGS] = SenateSittingsAdapter(transport, catalog)
        adapters[ResourceKind.VOTINGS] = SenateVotingsAdapter(transport, catalog)
        adapters[ResourceKind.BALLOTS] = SenateBallotsAdapter(transport)
    return adapters


__all__ = [
    "BaseAdapter",
    "FetchContext",
    "FetchError",
    "SejmTransport",
    "build_adapters",
    "parse_transcript_html",
    "MembersAdapter",
    "SittingsAdapter",
    "TranscriptsAdapter",
    "VotingsAdapter",
    "BallotsAdapter",
    "CommitteesAdapter",
    "CommitteeSessionsAdapter",
    "CommitteeStatementsAdapter",
    "InterpellationsAdapter",
    "WrittenQuestionsAdapter",
    "LegislativeDraftsAdapter",
    "EnactedActsAdapter",
    "FinancialDisclosuresAdapter",
    "SenateCatalog",
    "SenateSittingsAdapter",
    "SenateVotingsAdapter",
    "SenateBallotsAdapter",
]
