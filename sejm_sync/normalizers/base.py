"""
Shared normalizer context and key builders.

Composite keys are pure functions of natural fields, so recomputing them
from the same raw record always yields the same row key.
"""

from dataclasses import dataclass, field
from typing import Any

from .speakers import SpeakerResolver


@dataclass
class NormalizeContext:
    chamber: str
    term: int
    speakers: SpeakerResolver = field(default_factory=lambda: SpeakerResolver([]))


def make_key(*parts: Any) -> str:
    """Join natural key parts with underscores."""
    return "_".join(str(p) for p in parts)


def sitting_key(chamber: str, term: int, number: Any) -> str:
    return make_key(chamber, term, number)


def voting_key(chamber: str, term: int, sitting: Any, voting_number: Any) -> str:
    return make_key(chamber, term, sitting, voting_number)


def committee_key(chamber: str, term: int, code: str) -> str:
    return make_key(chamber, term, code)
