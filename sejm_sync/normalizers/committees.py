"""
Committee, committee session and committee statement normalizers.

Committee fallbacks:  code | kod ; name | nazwa ; type | typ
Session fallbacks:    num | number | numer ; agenda | opis | temat
"""

from typing import Any, Dict, Optional

from ..models.committee import Committee, CommitteeSession, CommitteeStatement
from .base import NormalizeContext, committee_key, make_key
from .fields import as_bool, as_int, as_str, date_part, pick


def normalize_committee(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[Committee]:
    code = as_str(pick(raw, "code", "kod"))
    if code is None:
        return None

    return Committee(
        committee_id=committee_key(ctx.chamber, ctx.term, code),
        chamber=ctx.chamber,
        term=ctx.term,
        code=code,
        name=as_str(pick(raw, "name", "nazwa")),
        name_genitive=as_str(raw.get("nameGenitive")),
        type=as_str(pick(raw, "type", "typ")),
        appointment_date=date_part(raw.get("appointmentDate")),
        composition_date=date_part(raw.get("compositionDate")),
        phone=as_str(raw.get("phone")),
        scope=as_str(raw.get("scope")),
    )


def normalize_committee_session(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[CommitteeSession]:
    code = as_str(pick(raw, "committeeCode", "komisja"))
    number = as_int(pick(raw, "num", "number", "numer"))
    if code is None or number is None:
        return None

    committee_id = committee_key(as_str(raw.get("chamber")) or ctx.chamber, ctx.term, code)
    return CommitteeSession(
        session_id=make_key(committee_id, number),
        committee_id=committee_id,
        committee_code=code,
        number=number,
        date=date_part(pick(raw, "date", "data")),
        agenda=as_str(pick(raw, "agenda", "opis", "temat")),
        closed=as_bool(raw.get("closed")),
        remote=as_bool(raw.get("remote")),
    )


def normalize_committee_statement(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[CommitteeStatement]:
    code = as_str(raw.get("committeeCode"))
    number = as_int(raw.get("sessionNum"))
    index = as_int(raw.get("fragmentIndex"))
    text = as_str(pick(raw, "text", "tekst"))
    if code is None or number is None or index is None or not text:
        return None

    committee_id = committee_key(as_str(raw.get("chamber")) or ctx.chamber, ctx.term, code)
    session_id = make_key(committee_id, number)
    label = as_str(raw.get("speaker")) or ""
    member_id, club = ctx.speakers.resolve(label)

    return CommitteeStatement(
        statement_id=make_key(session_id, index),
        session_id=session_id,
        committee_id=committee_id,
        fragment_index=index,
        date=date_part(raw.get("date")),
        speaker_label=label,
        member_id=member_id,
        club=club,
        text=text,
    )
