"""
Voting and ballot models.
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class BallotValue(str, Enum):
    YES = "YES"
    NO = "NO"
    ABSTAIN = "ABSTAIN"
    ABSENT = "ABSENT"


class Voting(BaseModel):
    """Roll-call voting with aggregate tallies."""
    voting_id: str = Field(description="{chamber}_{term}_{sitting}_{votingNumber}")
    sitting_id: str = Field(description="Parent sitting key")
    chamber: str
    term: int
    sitting_number: int
    voting_number: int
    date: Optional[str] = Field(None, description="ISO timestamp of the voting")
    title: Optional[str] = None
    topic: Optional[str] = None
    description: Optional[str] = None
    kind: Optional[str] = Field(None, description="ELECTRONIC, TRADITIONAL, ON_LIST...")
    yes: int = 0
    no: int = 0
    abstain: int = 0
    not_participating: int = 0
    total_voted: int = 0
    result: Optional[str] = Field(None, description="Outcome as published, if any")


class Ballot(BaseModel):
    """One member's recorded vote in one voting."""
    ballot_id: str = Field(description="{votingId}_{personId}")
    voting_id: str
    person_id: str
    vote: BallotValue
    club: Optional[str] = None
