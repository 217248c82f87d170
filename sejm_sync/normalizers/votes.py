"""
Voting and ballot normalizers.

Voting fallbacks:
    votingNumber  votingNumber | number | numer
    yes/no/abstain  yes | za ; no | przeciw ; abstain | wstrzymalo
    result        result | wynik

Ballot vote values accept English, Polish and historical spellings and
map onto YES / NO / ABSTAIN / ABSENT; anything else yields no row.
"""

from typing import Any, Dict, Optional

from ..models.vote import Ballot, BallotValue, Voting
from ..utils.text import fold_diacritics
from .base import NormalizeContext, make_key, sitting_key, voting_key
from .fields import as_int, as_str, pick

VOTE_VALUES = {
    "YES": BallotValue.YES,
    "ZA": BallotValue.YES,
    "FOR": BallotValue.YES,
    "NO": BallotValue.NO,
    "PRZECIW": BallotValue.NO,
    "AGAINST": BallotValue.NO,
    "ABSTAIN": BallotValue.ABSTAIN,
    "ABSTAINED": BallotValue.ABSTAIN,
    "WSTRZYMAL SIE": BallotValue.ABSTAIN,
    "WSTRZYMALA SIE": BallotValue.ABSTAIN,
    "ABSENT": BallotValue.ABSENT,
    "NIEOBECNY": BallotValue.ABSENT,
    "NIEOBECNA": BallotValue.ABSENT,
    "NOT_PARTICIPATING": BallotValue.ABSENT,
    "NIE GLOSOWAL": BallotValue.ABSENT,
    "NIE GLOSOWALA": BallotValue.ABSENT,
}


def parse_vote_value(value: Any) -> Optional[BallotValue]:
    if value is None:
        return None
    return VOTE_VALUES.get(fold_diacritics(str(value)).strip().upper())


def normalize_voting(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[Voting]:
    sitting = as_int(pick(raw, "sitting", "id_posiedzenia"))
    number = as_int(pick(raw, "votingNumber", "number", "numer"))
    if sitting is None or number is None:
        return None

    chamber = as_str(raw.get("chamber")) or ctx.chamber
    term = as_int(raw.get("term"), ctx.term)

    return Voting(
        voting_id=voting_key(chamber, term, sitting, number),
        sitting_id=sitting_key(chamber, term, sitting),
        chamber=chamber,
        term=term,
        sitting_number=sitting,
        voting_number=number,
        date=as_str(pick(raw, "date", "data")),
        title=as_str(pick(raw, "title", "tytul")),
        topic=as_str(raw.get("topic")),
        description=as_str(pick(raw, "description", "opis")),
        kind=as_str(raw.get("kind")),
        yes=as_int(pick(raw, "yes", "za"), 0),
        no=as_int(pick(raw, "no", "przeciw"), 0),
        abstain=as_int(pick(raw, "abstain", "wstrzymalo"), 0),
        not_participating=as_int(raw.get("notParticipating"), 0),
        total_voted=as_int(raw.get("totalVoted"), 0),
        result=as_str(pick(raw, "result", "wynik")),
    )


def normalize_ballot(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[Ballot]:
    sitting = as_int(raw.get("sitting"))
    number = as_int(pick(raw, "votingNumber", "number"))
    person_id = as_str(pick(raw, "MP", "id_osoby", "personId"))
    vote = parse_vote_value(pick(raw, "vote", "glos"))
    if sitting is None or number is None or person_id is None or vote is None:
        return None

    chamber = as_str(raw.get("chamber")) or ctx.chamber
    voting_id = voting_key(chamber, as_int(raw.get("term"), ctx.term), sitting, number)
    return Ballot(
        ballot_id=make_key(voting_id, person_id),
        voting_id=voting_id,
        person_id=person_id,
        vote=vote,
        club=as_str(pick(raw, "club", "klub")),
    )
