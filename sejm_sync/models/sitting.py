"""
Sitting and transcript statement models.
"""
from typing import Optional, List
from pydantic import BaseModel, Field


class Sitting(BaseModel):
    """Numbered plenary sitting spanning one or more dates."""
    sitting_id: str = Field(description="{chamber}_{term}_{number}")
    chamber: str
    term: int
    number: int = Field(gt=0, description="Sitting number; placeholders (<= 0) are never stored")
    title: Optional[str] = None
    dates: List[str] = Field(default_factory=list, description="ISO dates, possibly empty")
    first_date: Optional[str] = None
    last_date: Optional[str] = None
    current: bool = False


class Statement(BaseModel):
    """One speaker's remarks within one transcript page of one sitting day."""
    statement_id: str = Field(
        description="{chamber}_{sitting}_{date}_{transcriptIndex}_{fragmentIndex}"
    )
    sitting_id: str
    chamber: str
    term: int
    sitting_number: int
    date: str
    transcript_index: int
    fragment_index: int
    speaker_label: str = Field(description="Raw speaker heading, kept even when unresolved")
    member_id: Optional[str] = Field(None, description="Resolved member, or None")
    club: Optional[str] = None
    text: str
