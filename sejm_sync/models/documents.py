"""
Parliamentary document models: questions, drafts, enacted acts, disclosures.

These are flat entities keyed by natural composite ids, each optionally
referencing a member.
"""
from typing import Optional, List, Any, Dict
from pydantic import BaseModel, Field


class Interpellation(BaseModel):
    """Interpellation addressed to a minister."""
    interpellation_id: str = Field(description="{term}_{num}")
    term: int
    num: int
    title: Optional[str] = None
    author_id: Optional[str] = Field(None, description="First listed author")
    author_ids: List[str] = Field(default_factory=list)
    recipients: List[str] = Field(default_factory=list)
    receipt_date: Optional[str] = None
    sent_date: Optional[str] = None
    last_modified: Optional[str] = None
    status: str = Field(description="answered or pending")
    reply_count: int = 0


class WrittenQuestion(BaseModel):
    """Written question; shorter-deadline sibling of the interpellation."""
    question_id: str = Field(description="{term}_{num}")
    term: int
    num: int
    title: Optional[str] = None
    author_id: Optional[str] = None
    author_ids: List[str] = Field(default_factory=list)
    recipients: List[str] = Field(default_factory=list)
    receipt_date: Optional[str] = None
    sent_date: Optional[str] = None
    last_modified: Optional[str] = None
    status: str
    reply_count: int = 0


class WrittenQuestionReply(BaseModel):
    """Reply to a written question."""
    reply_id: str = Field(description="{questionId}_{replyKey}")
    question_id: str
    key: str
    author: Optional[str] = None
    receipt_date: Optional[str] = None
    last_modified: Optional[str] = None
    only_attachment: bool = False
    prolongation: bool = False


class LegislativeDraft(BaseModel):
    """Parliamentary print (draft bill)."""
    draft_id: str = Field(description="{term}_{number}")
    term: int
    number: str
    title: Optional[str] = None
    document_date: Optional[str] = None
    delivery_date: Optional[str] = None
    change_date: Optional[str] = None
    process_prints: List[str] = Field(default_factory=list)


class EnactedAct(BaseModel):
    """Act published in the official journal."""
    act_id: str = Field(description="{publisher}_{year}_{position}")
    publisher: str
    year: int
    position: int
    eli: Optional[str] = None
    title: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    promulgation: Optional[str] = None
    announcement_date: Optional[str] = None
    entry_into_force: Optional[str] = None


class FinancialDisclosure(BaseModel):
    """Asset declaration filed by a member."""
    disclosure_id: str = Field(description="{personId}_{year}_{index}")
    person_id: str
    year: Optional[int] = None
    index: int
    submitted_on: Optional[str] = None
    kind: Optional[str] = None
    document_url: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict, description="Remaining raw fields")
