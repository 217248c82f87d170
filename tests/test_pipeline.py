from datetime import UTC, datetime, timedelta

import httpx
import pytest
from sqlalchemy import select

from sejm_sync.db.models import MemberModel
from sejm_sync.db.repositories import SyncMetadataRepository
from sejm_sync.models.sync_models import (
    PipelineOutcome,
    RangeSelector,
    ResourceKind,
    SyncConfig,
)
from sejm_sync.orchestration.cancellation import CancellationToken
from sejm_sync.orchestration.pipeline import PipelineCallbacks, SyncPipeline

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def _config(**overrides) -> SyncConfig:
    values = {
        "modules": [ResourceKind.VOTINGS, ResourceKind.BALLOTS],
        "range": RangeSelector.last_n(2),
    }
    values.update(overrides)
    return SyncConfig(**values)


def _populate(api) -> None:
    api.add("/sejm/term10/MP", [
        {"id": 1, "firstName": "Jan", "lastName": "Kowalski", "club": "PiS", "email": "jan@sejm.pl"},
        {"id": 2, "firstName": "Anna", "lastName": "Nowak", "club": "KO"},
        {"id": 3, "firstName": "Piotr", "lastName": "Wiśniewski", "club": "PSL"},
    ])
    api.add("/sejm/term10/proceedings", [
        {"number": 0, "title": "Planowane", "dates": []},
        {"number": 40, "title": "40. Posiedzenie", "dates": ["2024-01-10"]},
        {"number": 41, "title": "41. Posiedzenie", "dates": ["2024-01-24"]},
        {"number": 42, "title": "42. Posiedzenie", "dates": ["2024-02-14"]},
    ])
    api.add("/sejm/term10/votings/41", [{"votingNumber": 1, "title": "Ustawa o finansach"}])
    api.add("/sejm/term10/votings/42", [{"votingNumber": 1, "title": "Uchwała"}])
    api.add("/sejm/term10/votings/41/1", {"votes": [
        {"MP": 1, "vote": "YES"}, {"MP": 2, "vote": "NO"}, {"MP": 3, "vote": "ABSTAIN"},
    ]})
    api.add("/sejm/term10/votings/42/1", {"votes": [
        {"MP": 1, "vote": "NO"}, {"MP": 2, "vote": "YES"},
    ]})


@pytest.mark.asyncio
async def test_first_run_fetches_and_records_what_it_fetched(api, database, test_settings) -> None:
    _populate(api)
    completed = []

    async with api.client() as client:
        pipeline = SyncPipeline(database, test_settings, client=client, clock=lambda: NOW)
        result = await pipeline.run(_config(), PipelineCallbacks(on_complete=completed.append))

    assert result.outcome == PipelineOutcome.SUCCESS
    assert result.counts == {"members": 3, "sittings": 3, "votings": 2, "ballots": 5}
    assert result.fetched["ballots"] == 5
    assert api.count("/sejm/term10/votings/40") == 0
    assert completed == [result]

    async with database.session() as session:
        state = await SyncMetadataRepository(session).load_state("sejm", 10)
        members = (await session.execute(select(MemberModel))).scalars().all()

    assert state.fetched_sittings == {
        41: [ResourceKind.BALLOTS, ResourceKind.VOTINGS],
        42: [ResourceKind.BALLOTS, ResourceKind.VOTINGS],
    }
    assert state.members_fetched_at == NOW
    assert all(m.email is None for m in members)


@pytest.mark.asyncio
async def test_rerun_is_up_to_date_without_requests(api, database, test_settings) -> None:
    _populate(api)

    async with api.client() as client:
        pipeline = SyncPipeline(database, test_settings, client=client, clock=lambda: NOW)
        await pipeline.run(_config())
        calls = len(api.calls)
        result = await pipeline.run(_config())

    assert result.outcome == PipelineOutcome.UP_TO_DATE
    assert result.counts == {}
    assert len(api.calls) == calls


@pytest.mark.asyncio
async def test_cancelled_run_keeps_completed_tasks_and_resumes(api, database, test_settings) -> None:
    _populate(api)

    async with api.client() as client:
        pipeline = SyncPipeline(database, test_settings, client=client, clock=lambda: NOW)
        token = CancellationToken()

        def cancel_after_votings(pct, label, metrics) -> None:
            if label.startswith("Votings"):
                token.cancel("stop requested")

        aborted = await pipeline.run(
            _config(),
            PipelineCallbacks(on_progress=cancel_after_votings),
            cancel_token=token,
        )

        async with database.session() as session:
            state = await SyncMetadataRepository(session).load_state("sejm", 10)

        resumed = await pipeline.run(_config())

    assert aborted.outcome == PipelineOutcome.ABORTED
    assert aborted.error == "stop requested"
    assert aborted.counts["votings"] == 2
    assert "ballots" not in aborted.counts
    assert state.fetched_sittings == {41: [ResourceKind.VOTINGS], 42: [ResourceKind.VOTINGS]}

    assert resumed.outcome == PipelineOutcome.SUCCESS
    assert resumed.counts["ballots"] == 5
    assert "members" not in resumed.counts


@pytest.mark.asyncio
async def test_unavailable_sitting_list_fails_the_run(api, database, test_settings) -> None:
    _populate(api)
    api.add("/sejm/term10/proceedings", lambda request: httpx.Response(500))
    errors = []

    async with api.client() as client:
        pipeline = SyncPipeline(database, test_settings, client=client, clock=lambda: NOW)
        result = await pipeline.run(_config(), PipelineCallbacks(on_error=errors.append))

    assert result.outcome == PipelineOutcome.FAILED
    assert "Sitting list unavailable" in result.error
    assert len(errors) == 1
    assert not pipeline.running


@pytest.mark.asyncio
async def test_invalid_config_fails_before_any_request(api, database, test_settings) -> None:
    async with api.client() as client:
        pipeline = SyncPipeline(database, test_settings, client=client, clock=lambda: NOW)
        result = await pipeline.run({"modules": [], "term": 10})

    assert result.outcome == PipelineOutcome.FAILED
    assert api.calls == []


@pytest.mark.asyncio
async def test_term_modules_run_without_sitting_list(api, database, test_settings) -> None:
    _populate(api)
    api.add("/sejm/term10/interpellations", [
        {"num": 1, "title": "W sprawie dróg", "from": ["1"], "replies": []},
    ])

    async with api.client() as client:
        pipeline = SyncPipeline(database, test_settings, client=client, clock=lambda: NOW)
        result = await pipeline.run(_config(modules=[ResourceKind.INTERPELLATIONS]))

    assert result.outcome == PipelineOutcome.SUCCESS
    assert result.counts == {"members": 3, "interpellations": 1}
    assert api.count("/sejm/term10/proceedings") == 0


def _two_ballots(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"votes": [{"MP": 1, "vote": "YES"}, {"MP": 2, "vote": "NO"}]})


@pytest.mark.asyncio
async def test_ballots_of_large_sittings_are_all_stored(api, database, test_settings) -> None:
    _populate(api)
    api.add("/sejm/term10/votings/41", [{"votingNumber": n} for n in range(1, 81)])
    api.add("/sejm/term10/votings/42", [{"votingNumber": n} for n in range(1, 81)])
    api.routes.pop("/sejm/term10/votings/41/1")
    api.routes.pop("/sejm/term10/votings/42/1")
    api.fallback = _two_ballots

    async with api.client() as client:
        pipeline = SyncPipeline(database, test_settings, client=client, clock=lambda: NOW)
        result = await pipeline.run(_config())

        async with database.session() as session:
            state = await SyncMetadataRepository(session).load_state("sejm", 10)

    assert result.counts["votings"] == 160
    assert result.counts["ballots"] == 320
    assert result.issues == []
    assert set(state.fetched_sittings[41]) == {ResourceKind.VOTINGS, ResourceKind.BALLOTS}
    assert set(state.fetched_sittings[42]) == {ResourceKind.VOTINGS, ResourceKind.BALLOTS}


@pytest.mark.asyncio
async def test_sitting_cut_by_ballot_cap_continues_next_run(api, database, test_settings, monkeypatch) -> None:
    monkeypatch.setattr("sejm_sync.adapters.votings.MAX_VOTINGS_PER_SITTING", 2)
    _populate(api)
    api.add("/sejm/term10/votings/41", [{"votingNumber": n} for n in (1, 2, 3)])
    api.add("/sejm/term10/votings/41/2", {"votes": [{"MP": 1, "vote": "NO"}]})
    api.add("/sejm/term10/votings/41/3", {"votes": [{"MP": 1, "vote": "YES"}]})

    async with api.client() as client:
        pipeline = SyncPipeline(database, test_settings, client=client, clock=lambda: NOW)
        first = await pipeline.run(_config())

        async with database.session() as session:
            state = await SyncMetadataRepository(session).load_state("sejm", 10)

        second = await pipeline.run(_config())

    assert first.counts["ballots"] == 6
    assert [(i.deferred, i.context) for i in first.issues] == [(True, {"sitting": 41, "pending": 1})]
    assert state.fetched_sittings[41] == [ResourceKind.VOTINGS]

    assert second.outcome == PipelineOutcome.SUCCESS
    assert second.counts["ballots"] == 1
    assert api.count("/sejm/term10/votings/41/1") == 1
    assert api.count("/sejm/term10/votings/41/3") == 1
    assert api.count("/sejm/term10/votings/42/1") == 1


@pytest.mark.asyncio
async def test_sitting_in_progress_is_fetched_after_its_last_day(api, database, test_settings) -> None:
    _populate(api)
    api.add("/sejm/term10/proceedings", [
        {"number": 41, "title": "41. Posiedzenie", "dates": ["2024-01-24"]},
        {"number": 42, "title": "42. Posiedzenie", "dates": ["2024-02-29", "2024-03-01", "2024-03-02"]},
    ])
    pages = {}
    for sitting, day in [(41, "2024-01-24"), (42, "2024-02-29"), (42, "2024-03-01"), (42, "2024-03-02")]:
        pages[day] = f"/sejm/term10/proceedings/{sitting}/{day}/transcripts/1"
        api.html(pages[day], f'<h2 class="mowca">Marszałek Sejmu:</h2><p>Otwieram posiedzenie w dniu {day}.</p>')
    config = _config(modules=[ResourceKind.STATEMENTS], range=RangeSelector.last_n(1))

    async with api.client() as client:
        during = SyncPipeline(database, test_settings, client=client, clock=lambda: NOW)
        first = await during.run(config)
        requested_during = api.count(pages["2024-03-01"])

        after = SyncPipeline(database, test_settings, client=client, clock=lambda: NOW + timedelta(days=4))
        second = await after.run(config)

        async with database.session() as session:
            state = await SyncMetadataRepository(session).load_state("sejm", 10)

    assert first.counts["statements"] == 1
    assert requested_during == 0
    assert second.counts["statements"] == 3
    assert api.count(pages["2024-03-02"]) == 1
    assert state.fetched_sittings[42] == [ResourceKind.STATEMENTS]
