import pytest

from sejm_sync.db.repositories import BallotRepository, SittingRepository, VotingRepository
from sejm_sync.models.sync_models import ResourceKind
from sejm_sync.models.vote import BallotValue
from sejm_sync.normalizers import NormalizeContext, Normalizer
from sejm_sync.normalizers.documents import (
    normalize_enacted_act,
    normalize_financial_disclosure,
    normalize_legislative_draft,
)
from sejm_sync.normalizers.sittings import normalize_sitting
from sejm_sync.normalizers.votes import normalize_ballot, parse_vote_value
from sejm_sync.orchestration.privacy import apply_privacy_filter

CTX = NormalizeContext("sejm", 10)

RAW_SITTINGS = [
    {"number": 0, "title": "Planned", "dates": []},
    {"number": 41, "title": "41. Posiedzenie", "dates": ["2024-01-25", "2024-01-24"]},
    {"num": 42, "title": "42. Posiedzenie", "dates": ["2024-02-14"]},
]

RAW_VOTINGS = [
    {"sitting": 41, "votingNumber": 1, "date": "2024-01-24T10:00:00", "title": "Ustawa", "yes": 230, "no": 200},
    {"sitting": 41, "votingNumber": 2, "date": "2024-01-24T11:00:00", "title": "Poprawka", "yes": 10, "no": 420},
]

RAW_BALLOTS = [
    {"sitting": 41, "votingNumber": 1, "MP": 1, "vote": "YES", "club": "PiS"},
    {"sitting": 41, "votingNumber": 1, "MP": 2, "vote": "Przeciw", "club": "KO"},
    {"sitting": 41, "votingNumber": 1, "MP": 3, "vote": "VOTE_INVALID", "club": "KO"},
]


def test_placeholder_sitting_yields_no_row() -> None:
    assert normalize_sitting(RAW_SITTINGS[0], CTX) is None


def test_sitting_dates_are_sorted_and_keyed() -> None:
    sitting = normalize_sitting(RAW_SITTINGS[1], CTX)

    assert sitting.sitting_id == "sejm_10_41"
    assert sitting.first_date == "2024-01-24"
    assert sitting.last_date == "2024-01-25"


def test_vote_values_accept_polish_spellings() -> None:
    assert parse_vote_value("za") == BallotValue.YES
    assert parse_vote_value("Wstrzymał się") == BallotValue.ABSTAIN
    assert parse_vote_value("NIEOBECNY") == BallotValue.ABSENT
    assert parse_vote_value("maybe") is None


def test_ballot_key_is_voting_plus_member() -> None:
    ballot = normalize_ballot(RAW_BALLOTS[0], CTX)

    assert ballot.ballot_id == "sejm_10_41_1_1"
    assert ballot.voting_id == "sejm_10_41_1"
    assert ballot.vote == BallotValue.YES


def test_disclosure_key_without_year() -> None:
    disclosure = normalize_financial_disclosure({"personId": "7", "index": 2, "url": "x.pdf"}, CTX)

    assert disclosure.disclosure_id == "7_na_2"


def test_legislative_draft_key_and_dates() -> None:
    draft = normalize_legislative_draft(
        {"number": "12", "title": "Projekt", "deliveryDate": "2024-01-05T10:00:00", "processPrint": ["12"]},
        CTX,
    )

    assert draft.draft_id == "10_12"
    assert draft.document_date == "2024-01-05"
    assert draft.delivery_date == "2024-01-05"
    assert draft.process_prints == ["12"]
    assert normalize_legislative_draft({"title": "Bez numeru"}, CTX) is None


def test_enacted_act_key_needs_year_and_position() -> None:
    act = normalize_enacted_act(
        {"publisher": "MP", "year": 2023, "pos": 7, "ELI": "MP/2023/7", "entryIntoForce": "2023-02-01"},
        CTX,
    )

    assert act.act_id == "MP_2023_7"
    assert (act.eli, act.entry_into_force) == ("MP/2023/7", "2023-02-01")
    assert normalize_enacted_act({"publisher": "DU", "pos": 7}, CTX) is None


def test_written_question_replies_become_rows() -> None:
    raw = {
        "num": 15,
        "title": "Pytanie",
        "from": ["12"],
        "replies": [{"key": "ABC", "from": "Minister"}, {"from": "Minister"}],
    }

    tables = Normalizer("sejm", 10).normalize(ResourceKind.WRITTEN_QUESTIONS, [raw])

    question = tables["written_questions"][0]
    assert question.status == "answered"
    assert question.reply_count == 2
    assert [r.reply_id for r in tables["written_question_replies"]] == ["10_15_ABC", "10_15_1"]


def test_privacy_filter_drops_member_contact_fields() -> None:
    raw = [{"id": 1, "firstName": "Jan", "email": "jan@sejm.pl", "pesel": "1234"}]

    filtered = apply_privacy_filter(ResourceKind.MEMBERS, raw)

    assert filtered == [{"id": 1, "firstName": "Jan"}]
    assert raw[0]["email"] == "jan@sejm.pl"


def test_privacy_filter_leaves_other_kinds_alone() -> None:
    raw = [{"sitting": 41, "votingNumber": 1}]

    assert apply_privacy_filter(ResourceKind.VOTINGS, raw) is raw


@pytest.mark.asyncio
async def test_persist_skips_placeholders_and_is_idempotent(database) -> None:
    normalizer = Normalizer("sejm", 10)

    async with database.session() as session:
        counts = await normalizer.persist(session, ResourceKind.SITTINGS, RAW_SITTINGS)
    async with database.session() as session:
        await normalizer.persist(session, ResourceKind.SITTINGS, RAW_SITTINGS)

    assert counts == {"sittings": 2}
    async with database.session() as session:
        rows = await SittingRepository(session).list_for_term("sejm", 10)
    assert [row.number for row in rows] == [41, 42]


@pytest.mark.asyncio
async def test_persist_upserts_latest_values(database) -> None:
    normalizer = Normalizer("sejm", 10)

    async with database.session() as session:
        await normalizer.persist(session, ResourceKind.VOTINGS, RAW_VOTINGS)
        await normalizer.persist(session, ResourceKind.BALLOTS, RAW_BALLOTS)

    changed = [{**RAW_VOTINGS[0], "yes": 231}]
    async with database.session() as session:
        await normalizer.persist(session, ResourceKind.VOTINGS, changed)

    async with database.session() as session:
        votings = await VotingRepository(session).list_for_sitting("sejm_10_41")
        ballots = await BallotRepository(session).list_for_voting("sejm_10_41_1")
        assert await BallotRepository(session).count() == 2

    assert [v.yes for v in votings] == [231, 10]
    assert {b.vote for b in ballots} == {"YES", "NO"}


@pytest.mark.asyncio
async def test_statements_resolve_speakers_from_roster(database) -> None:
    normalizer = Normalizer("sejm", 10)
    statement = {
        "chamber": "sejm", "term": 10, "sitting": 41, "date": "2024-01-24",
        "transcriptIndex": 3, "fragmentIndex": 0,
        "speaker": "Poseł Jan Kowalski (PiS)", "text": "Panie Marszałku, Wysoka Izbo!",
    }

    async with database.session() as session:
        await normalizer.persist(session, ResourceKind.MEMBERS, [
            {"id": 1, "firstName": "Jan", "lastName": "Kowalski", "club": "PiS"},
        ])
        tables = normalizer.normalize(ResourceKind.STATEMENTS, [statement])

    row = tables["statements"][0]
    assert row.statement_id == "sejm_41_2024-01-24_3_0"
    assert (row.member_id, row.club) == ("1", "PiS")
    assert normalizer.speaker_stats.as_dict() == {"matched": 1, "unmatched": 0}
