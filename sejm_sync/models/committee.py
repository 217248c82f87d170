"""
Committee, committee session and committee statement models.
"""
from typing import Optional
from pydantic import BaseModel, Field


class Committee(BaseModel):
    """Standing, extraordinary or investigative committee."""
    committee_id: str = Field(description="{chamber}_{term}_{code}")
    chamber: str
    term: int
    code: str = Field(description="Upstream committee code, e.g. ASW")
    name: Optional[str] = None
    name_genitive: Optional[str] = None
    type: Optional[str] = Field(None, description="STANDING, EXTRAORDINARY, INVESTIGATIVE")
    appointment_date: Optional[str] = None
    composition_date: Optional[str] = None
    phone: Optional[str] = None
    scope: Optional[str] = None


class CommitteeSession(BaseModel):
    """One numbered session of a committee."""
    session_id: str = Field(description="{committeeId}_{sessionNumber}")
    committee_id: str
    committee_code: str
    number: int
    date: Optional[str] = None
    agenda: Optional[str] = None
    closed: bool = False
    remote: bool = False


class CommitteeStatement(BaseModel):
    """One speaker fragment from a committee session transcript."""
    statement_id: str = Field(description="{sessionId}_{fragmentIndex}")
    session_id: str
    committee_id: str
    fragment_index: int
    date: Optional[str] = None
    speaker_label: str
    member_id: Optional[str] = None
    club: Optional[str] = None
    text: str
