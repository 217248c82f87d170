from datetime import UTC, datetime

import pytest

from sejm_sync.config import DatabaseConfig
from sejm_sync.db.repositories import (
    CommitteeSessionRepository,
    MemberRepository,
    SyncMetadataRepository,
    VotingRepository,
)
from sejm_sync.db.session import Database
from sejm_sync.models.sync_models import ResourceKind
from sejm_sync.normalizers import Normalizer

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def _member(person_id: str, club: str) -> dict:
    return {
        "person_id": person_id, "chamber": "sejm", "term": 10,
        "first_name": "Jan", "last_name": "Kowalski", "full_name": "Jan Kowalski",
        "club": club, "active": True,
    }


@pytest.mark.asyncio
async def test_upsert_many_collapses_duplicate_keys(database) -> None:
    async with database.session() as session:
        written = await MemberRepository(session).upsert_many([_member("1", "PiS"), _member("1", "KO")])

    async with database.session() as session:
        member = await MemberRepository(session).get("1")

    assert written == 1
    assert member.club == "KO"


@pytest.mark.asyncio
async def test_sitting_marks_are_merged_never_removed(database) -> None:
    async with database.session() as session:
        metadata = SyncMetadataRepository(session)
        await metadata.mark_sittings_fetched("sejm", 10, {41: [ResourceKind.VOTINGS]})
        await metadata.mark_sittings_fetched("sejm", 10, {41: [ResourceKind.STATEMENTS], 42: [ResourceKind.VOTINGS]})

    async with database.session() as session:
        state = await SyncMetadataRepository(session).load_state("sejm", 10)

    assert state.fetched_sittings == {
        41: [ResourceKind.STATEMENTS, ResourceKind.VOTINGS],
        42: [ResourceKind.VOTINGS],
    }


@pytest.mark.asyncio
async def test_clear_is_scoped_to_chamber_and_term(database) -> None:
    async with database.session() as session:
        metadata = SyncMetadataRepository(session)
        await metadata.mark_members_fetched("sejm", 10, NOW)
        await metadata.mark_members_fetched("sejm", 9, NOW)

    async with database.session() as session:
        removed = await SyncMetadataRepository(session).clear("sejm", 10)

    async with database.session() as session:
        metadata = SyncMetadataRepository(session)
        assert not (await metadata.load_state("sejm", 10)).has_metadata
        assert (await metadata.load_state("sejm", 9)).members_fetched_at == NOW

    assert removed == 1


@pytest.mark.asyncio
async def test_export_then_import_restores_rows(database, tmp_path) -> None:
    async with database.session() as session:
        await MemberRepository(session).upsert_many([_member("1", "PiS")])
    snapshot = await database.export_bytes()

    restored = Database(DatabaseConfig(path=str(tmp_path / "restored.db")))
    await restored.initialize()
    try:
        await restored.import_bytes(snapshot)
        async with restored.session() as session:
            assert await MemberRepository(session).count() == 1
    finally:
        await restored.close()


@pytest.mark.asyncio
async def test_import_rejects_non_sqlite_bytes(database) -> None:
    with pytest.raises(ValueError):
        await database.import_bytes(b"definitely not a database")


@pytest.mark.asyncio
async def test_stored_progress_lists_only_work_with_children(database) -> None:
    normalizer = Normalizer("sejm", 10)
    async with database.session() as session:
        await normalizer.persist(session, ResourceKind.VOTINGS, [
            {"sitting": 41, "votingNumber": 1}, {"sitting": 41, "votingNumber": 2}, {"sitting": 42, "votingNumber": 1},
        ])
        await normalizer.persist(session, ResourceKind.BALLOTS, [
            {"sitting": 41, "votingNumber": 2, "MP": 1, "vote": "YES"},
            {"sitting": 42, "votingNumber": 1, "MP": 1, "vote": "NO"},
        ])
        await normalizer.persist(session, ResourceKind.COMMITTEE_SESSIONS, [
            {"committeeCode": "ASW", "num": 5}, {"committeeCode": "ASW", "num": 6},
        ])
        await normalizer.persist(session, ResourceKind.COMMITTEE_STATEMENTS, [
            {"committeeCode": "ASW", "sessionNum": 6, "fragmentIndex": 0, "speaker": "Poseł", "text": "Otwieram posiedzenie."},
        ])

    async with database.session() as session:
        votings = await VotingRepository(session).numbers_with_ballots("sejm", 10, [41])
        other_term = await VotingRepository(session).numbers_with_ballots("sejm", 9, [41, 42])
        sessions = await CommitteeSessionRepository(session).numbers_with_statements("sejm", 10)

    assert votings == {(41, 2)}
    assert other_term == set()
    assert sessions == {("ASW", 6)}
