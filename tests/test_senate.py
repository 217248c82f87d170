from datetime import UTC, datetime

import httpx
import pytest
from sqlalchemy import select

from sejm_sync.adapters import build_adapters
from sejm_sync.adapters.base_adapter import FetchContext
from sejm_sync.adapters.senate import (
    SenateBallotsAdapter,
    SenateCatalog,
    SenateSittingsAdapter,
    SenateVotingResource,
    SenateVotingsAdapter,
    parse_catalog,
    parse_resource_ids,
    parse_votes_csv,
    senator_id,
)
from sejm_sync.db.models import MemberModel
from sejm_sync.db.repositories import SyncMetadataRepository
from sejm_sync.models.fetch_models import FetchStatus
from sejm_sync.models.sync_models import (
    Chamber,
    PipelineOutcome,
    RangeSelector,
    ResourceKind,
    SittingTarget,
    SyncConfig,
)
from sejm_sync.normalizers import Normalizer
from sejm_sync.orchestration.pipeline import SyncPipeline

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)

CATALOG_PATH = "/gfx/senat/glosowania_wyniki/senat.xml"
FILES = "https://www.senat.gov.pl/gfx/senat/glosowania_wyniki"
VOTING_KINDS = [ResourceKind.VOTINGS, ResourceKind.BALLOTS]


def _resource(url: str, status: str = "published", ident: str = "") -> str:
    return (
        f'<resource status="{status}">'
        f"<extIdent>{ident}</extIdent>"
        f"<url>{url}</url>"
        "<title><polish>Wyniki imienne</polish></title>"
        "<description><polish>Głosowanie nad ustawą</polish></description>"
        "</resource>"
    )


CATALOG = (
    '<?xml version="1.0" encoding="UTF-8"?><catalog><resources>'
    + _resource(f"{FILES}/kadencja_10/Posiedzenie_2_dzien_1_glosowanie_1_imie.csv")
    + _resource(f"{FILES}/kadencja_10/Posiedzenie_1_dzien_1_glosowanie_2_imie.csv")
    + _resource(f"{FILES}/kadencja_10/Posiedzenie_1_dzien_1_glosowanie_1_imie.csv")
    + _resource(f"{FILES}/kadencja_10/Posiedzenie_1_dzien_1_glosowanie_1_kluby.csv")
    + _resource(f"{FILES}/kadencja_10/Posiedzenie_3_dzien_1_glosowanie_1_imie.csv", status="draft")
    + _resource(f"{FILES}/kadencja_9/Posiedzenie_50_dzien_1_glosowanie_1_imie.csv")
    + _resource(f"{FILES}/kadencja_10/wyniki_7_imie.csv", ident="k_10_pos_4_dz_2_glos_7_imie")
    + "</resources></catalog>"
)

CSV_PASSED = (
    '"Ustawa o zmianie ustawy budżetowej"\n'
    "głosowało : 3, za: 2, przeciw: 1, wstrzymało się: 0\n"
    "Senator,Głos\n"
    "Jan Kowalski,za\n"
    "Anna Nowak,przeciw\n"
    "Maria Wiśniewska,za\n"
)

CSV_REJECTED = (
    '"Wniosek o odrzucenie ustawy"\n'
    "głosowało : 3, za: 0, przeciw: 2, wstrzymało się: 1\n"
    "Senator;Głos\n"
    "Jan Kowalski;przeciw\n"
    "Anna Nowak;wstrzymała się\n"
    "Maria Wiśniewska;nie głosowała\n"
)


def _path(sitting: int, number: int) -> str:
    return f"/gfx/senat/glosowania_wyniki/kadencja_10/Posiedzenie_{sitting}_dzien_1_glosowanie_{number}_imie.csv"


def _populate(api) -> None:
    api.add(CATALOG_PATH, httpx.Response(200, text=CATALOG))
    api.add(_path(1, 1), httpx.Response(200, text=CSV_PASSED))
    api.add(_path(1, 2), httpx.Response(200, text=CSV_REJECTED))
    api.add(_path(2, 1), httpx.Response(200, text=CSV_PASSED))
    api.add("/gfx/senat/glosowania_wyniki/kadencja_10/wyniki_7_imie.csv", httpx.Response(200, text=CSV_REJECTED))


def _context(*sittings: int) -> FetchContext:
    return FetchContext(
        term=11,
        chamber=Chamber.SENAT,
        sittings=[SittingTarget(number=n, kinds=VOTING_KINDS) for n in sittings],
    )


def test_resource_ids_from_url_or_identifier() -> None:
    assert parse_resource_ids("kadencja_10/Posiedzenie_12_dzien_2_glosowanie_31_imie.csv") == (12, 2, 31)
    assert parse_resource_ids("k_10_pos_4_dz_2_glos_7_imie") == (4, 2, 7)
    assert parse_resource_ids("senat.xml") is None


def test_catalog_keeps_published_per_senator_files_of_the_term() -> None:
    resources = parse_catalog(CATALOG, "kadencja_10")

    assert [(r.sitting, r.day, r.number) for r in resources] == [(1, 1, 1), (1, 1, 2), (2, 1, 1), (4, 2, 7)]
    assert resources[0].description == "Głosowanie nad ustawą"


def test_votes_csv_summary_and_rows() -> None:
    resource = SenateVotingResource(url=f"{FILES}/x_imie.csv", sitting=1, day=1, number=1)

    voting = parse_votes_csv(CSV_PASSED, resource)

    assert voting["title"] == "Ustawa o zmianie ustawy budżetowej"
    assert (voting["yes"], voting["no"], voting["abstain"], voting["totalVoted"]) == (2, 1, 0, 3)
    assert voting["result"] == "przyjęto"
    assert voting["votes"][2] == {"senator": "Maria Wiśniewska", "vote": "za"}


def test_votes_csv_with_semicolons() -> None:
    resource = SenateVotingResource(url=f"{FILES}/x_imie.csv", sitting=1, day=1, number=2)

    voting = parse_votes_csv(CSV_REJECTED, resource)

    assert voting["result"] == "odrzucono"
    assert voting["abstain"] == 1
    assert [v["vote"] for v in voting["votes"]] == ["przeciw", "wstrzymała się", "nie głosowała"]


def test_votes_csv_without_rows() -> None:
    resource = SenateVotingResource(url=f"{FILES}/x_imie.csv", sitting=1, day=1, number=1)

    assert parse_votes_csv('"Tytuł"\nza: 0\n', resource) is None


def test_senator_id_ignores_case_and_diacritics() -> None:
    assert senator_id("Maria Wiśniewska") == senator_id("maria  wisniewska")
    assert senator_id("Maria Wiśniewska") != senator_id("Jan Kowalski")
    assert senator_id("Jan Kowalski").startswith("S")


@pytest.mark.asyncio
async def test_senate_chamber_uses_catalog_adapters(transport) -> None:
    adapters = build_adapters(transport, Chamber.SENAT)

    assert isinstance(adapters[ResourceKind.SITTINGS], SenateSittingsAdapter)
    assert isinstance(adapters[ResourceKind.VOTINGS], SenateVotingsAdapter)
    assert isinstance(adapters[ResourceKind.BALLOTS], SenateBallotsAdapter)


@pytest.mark.asyncio
async def test_sittings_come_from_the_catalog(api, transport) -> None:
    _populate(api)

    response = await SenateSittingsAdapter(transport, SenateCatalog(transport)).fetch(_context())

    assert response.data == [
        {"number": 1, "dates": []},
        {"number": 2, "dates": []},
        {"number": 4, "dates": []},
    ]


@pytest.mark.asyncio
async def test_unpublished_term_fails_without_requests(api, transport) -> None:
    context = FetchContext(term=9, chamber=Chamber.SENAT)

    response = await SenateSittingsAdapter(transport, SenateCatalog(transport)).fetch(context)

    assert response.status == FetchStatus.FAILURE
    assert api.calls == []


@pytest.mark.asyncio
async def test_votings_fetch_target_sittings_and_share_the_catalog(api, transport) -> None:
    _populate(api)
    catalog = SenateCatalog(transport)
    await SenateSittingsAdapter(transport, catalog).fetch(_context())

    response = await SenateVotingsAdapter(transport, catalog).fetch(_context(1))

    assert [(v["sitting"], v["votingNumber"], v["chamber"], v["term"]) for v in response.data] == [
        (1, 1, "senat", 11),
        (1, 2, "senat", 11),
    ]
    assert api.count(CATALOG_PATH) == 1
    assert api.count(_path(2, 1)) == 0


@pytest.mark.asyncio
async def test_failed_csv_is_an_issue_for_its_sitting(api, transport) -> None:
    _populate(api)
    api.add(_path(1, 2), lambda request: httpx.Response(503))

    response = await SenateVotingsAdapter(transport, SenateCatalog(transport)).fetch(_context(1))

    assert [v["votingNumber"] for v in response.data] == [1]
    [issue] = response.issues
    assert (issue.context["sitting"], issue.context["voting"]) == (1, 2)


@pytest.mark.asyncio
async def test_ballots_expand_votes_without_requests(api, transport) -> None:
    context = _context(1)
    context.prerequisites[ResourceKind.VOTINGS] = [
        {"sitting": 1, "votingNumber": 1, "votes": [{"senator": "Jan Kowalski", "vote": "za"}]},
        {"sitting": 2, "votingNumber": 1, "votes": [{"senator": "Anna Nowak", "vote": "za"}]},
    ]

    response = await SenateBallotsAdapter(transport).fetch(context)

    assert response.data == [{
        "chamber": "senat",
        "term": 11,
        "sitting": 1,
        "votingNumber": 1,
        "personId": senator_id("Jan Kowalski"),
        "senator": "Jan Kowalski",
        "vote": "za",
    }]
    assert api.calls == []


def test_senate_ballots_add_senator_members() -> None:
    raw = [
        {"sitting": 1, "votingNumber": 1, "personId": "S1", "senator": "Anna Maria Nowak", "vote": "wstrzymała się"},
        {"sitting": 1, "votingNumber": 1, "personId": "S2", "senator": "Jan Kowalski", "vote": "nieobecna"},
    ]

    tables = Normalizer("senat", 11).normalize(ResourceKind.BALLOTS, raw)

    assert [b.ballot_id for b in tables["ballots"]] == ["senat_11_1_1_S1", "senat_11_1_1_S2"]
    assert [b.vote for b in tables["ballots"]] == ["ABSTAIN", "ABSENT"]
    senator = tables["members"][0]
    assert (senator.first_name, senator.last_name, senator.chamber) == ("Anna Maria", "Nowak", "senat")


@pytest.mark.asyncio
async def test_senate_run_stores_votings_and_leaves_newest_sitting_open(api, database, test_settings) -> None:
    _populate(api)
    config = SyncConfig(chamber=Chamber.SENAT, term=11, modules=VOTING_KINDS, range=RangeSelector.custom(1, 4))

    async with api.client() as client:
        pipeline = SyncPipeline(database, test_settings, client=client, clock=lambda: NOW)
        result = await pipeline.run(config)

    assert result.outcome == PipelineOutcome.SUCCESS
    assert result.counts == {"sittings": 3, "votings": 4, "ballots": 12, "members": 3}
    assert api.count(CATALOG_PATH) == 1

    async with database.session() as session:
        state = await SyncMetadataRepository(session).load_state("senat", 11)
        senators = (await session.execute(select(MemberModel))).scalars().all()

    assert set(state.fetched_sittings) == {1, 2}
    assert {m.person_id for m in senators} == {senator_id("Jan Kowalski"), senator_id("Anna Nowak"),
                                               senator_id("Maria Wiśniewska")}
