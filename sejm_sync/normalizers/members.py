"""
Member normalizer.

Field fallbacks:
    person_id   id | id_osoby | personId
    first_name  firstName | imie
    second_name secondName | drugieImie
    last_name   lastName | nazwisko
    club        club | klub | partia
    district    districtNum | okreg ; districtName | okregNazwa
    active      active | aktywny (default True)
"""

from typing import Any, Dict, Optional

from ..models.member import Member
from .base import NormalizeContext
from .fields import as_bool, as_int, as_str, pick


def normalize_member(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[Member]:
    person_id = as_str(pick(raw, "id", "id_osoby", "personId"))
    if person_id is None:
        return None

    first_name = as_str(pick(raw, "firstName", "imie"))
    last_name = as_str(pick(raw, "lastName", "nazwisko"))
    full_name = as_str(pick(raw, "firstLastName", "imieNazwisko")) or " ".join(
        p for p in (first_name, last_name) if p
    )

    return Member(
        person_id=person_id,
        chamber=ctx.chamber,
        term=ctx.term,
        first_name=first_name,
        second_name=as_str(pick(raw, "secondName", "drugieImie")),
        last_name=last_name,
        full_name=full_name or person_id,
        club=as_str(pick(raw, "club", "klub", "partia")),
        district_num=as_int(pick(raw, "districtNum", "okreg")),
        district_name=as_str(pick(raw, "districtName", "okregNazwa")),
        voivodeship=as_str(pick(raw, "voivodeship", "wojewodztwo")),
        profession=as_str(pick(raw, "profession", "zawod")),
        role=as_str(pick(raw, "role", "funkcja")),
        email=as_str(pick(raw, "email")),
        active=as_bool(pick(raw, "active", "aktywny"), default=True),
    )


def normalize_senator(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[Member]:
    """Member row for a senator known only by the name on a Senate ballot."""
    parts = (as_str(raw.get("senator")) or "").split()
    person_id = as_str(raw.get("personId"))
    if not parts or person_id is None:
        return None

    *first, last = parts
    return normalize_member(
        {"id": person_id, "firstName": " ".join(first) or None, "lastName": last, "firstLastName": " ".join(parts)},
        ctx,
    )
