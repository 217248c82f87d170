"""
Sitting and transcript statement normalizers.

Sitting fallbacks:
    number  number | num | numer      (rows with number <= 0 are rejected)
    dates   dates | daty              (may be empty)
    title   title | tytul

Statement fallbacks (records produced by the transcripts adapter):
    sitting          sitting
    transcriptIndex  transcriptIndex | transcriptNum
    speaker          speaker | speakerRaw
"""

from typing import Any, Dict, Optional

from ..models.sitting import Sitting, Statement
from .base import NormalizeContext, make_key, sitting_key
from .fields import as_bool, as_int, as_str, as_str_list, pick


def normalize_sitting(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[Sitting]:
    number = as_int(pick(raw, "number", "num", "numer"))
    if number is None or number <= 0:
        return None

    dates = sorted(as_str_list(pick(raw, "dates", "daty")))
    return Sitting(
        sitting_id=sitting_key(ctx.chamber, ctx.term, number),
        chamber=ctx.chamber,
        term=ctx.term,
        number=number,
        title=as_str(pick(raw, "title", "tytul")),
        dates=dates,
        first_date=dates[0] if dates else None,
        last_date=dates[-1] if dates else None,
        current=as_bool(raw.get("current")),
    )


def normalize_statement(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[Statement]:
    sitting = as_int(pick(raw, "sitting", "num"))
    date = as_str(raw.get("date"))
    transcript_index = as_int(pick(raw, "transcriptIndex", "transcriptNum"))
    fragment_index = as_int(raw.get("fragmentIndex"))
    text = as_str(raw.get("text"))
    if None in (sitting, date, transcript_index, fragment_index) or not text:
        return None

    chamber = as_str(raw.get("chamber")) or ctx.chamber
    term = as_int(raw.get("term"), ctx.term)
    label = as_str(pick(raw, "speaker", "speakerRaw")) or ""
    member_id, club = ctx.speakers.resolve(label)

    return Statement(
        statement_id=make_key(chamber, sitting, date, transcript_index, fragment_index),
        sitting_id=sitting_key(chamber, term, sitting),
        chamber=chamber,
        term=term,
        sitting_number=sitting,
        date=date,
        transcript_index=transcript_index,
        fragment_index=fragment_index,
        speaker_label=label,
        member_id=member_id,
        club=club,
        text=text,
    )
