"""
Member (deputy / senator) model.
"""
from typing import Optional
from pydantic import BaseModel, Field


class Member(BaseModel):
    """Member of the chamber for one term."""
    person_id: str = Field(description="Upstream member id")
    chamber: str = Field(description="sejm or senat")
    term: int = Field(description="Term number")
    first_name: Optional[str] = Field(None, description="Given name")
    second_name: Optional[str] = Field(None, description="Middle name")
    last_name: Optional[str] = Field(None, description="Surname")
    full_name: str = Field(description="First and last name joined")
    club: Optional[str] = Field(None, description="Parliamentary club / party")
    district_num: Optional[int] = Field(None, description="Constituency number")
    district_name: Optional[str] = Field(None, description="Constituency name")
    voivodeship: Optional[str] = Field(None, description="Region of the constituency")
    profession: Optional[str] = Field(None, description="Declared profession")
    role: Optional[str] = Field(None, description="Function in the chamber, if any")
    email: Optional[str] = Field(None, description="Office e-mail, unless filtered")
    active: bool = Field(True, description="Whether the mandate is currently held")
