from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from sejm_sync.models.sync_models import (
    Chamber,
    RangeSelector,
    ResourceKind,
    SittingTarget,
    SyncConfig,
    SyncState,
)
from sejm_sync.orchestration.planner import SyncPlanner

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)

SITTINGS = [
    SittingTarget(number=0, dates=[]),
    SittingTarget(number=40, dates=["2024-01-09", "2024-01-10"]),
    SittingTarget(number=41, dates=["2024-01-24"]),
    SittingTarget(number=42, dates=["2024-02-14", "2024-02-15"]),
    SittingTarget(number=43, dates=["2024-03-20"]),
]


def _config(**overrides) -> SyncConfig:
    values = {
        "modules": [ResourceKind.VOTINGS, ResourceKind.BALLOTS],
        "range": RangeSelector.last_n(2),
    }
    values.update(overrides)
    return SyncConfig(**values)


def _fresh_state(**overrides) -> SyncState:
    values = {
        "members_fetched_at": NOW - timedelta(days=1),
        "sitting_list_fetched_at": NOW - timedelta(hours=1),
    }
    values.update(overrides)
    return SyncState(**values)


def test_first_run_fetches_members_and_sitting_list() -> None:
    plan = SyncPlanner().plan(_config(), SyncState(), [], NOW)

    assert plan.must_fetch_members
    assert plan.must_fetch_sitting_list
    assert plan.sittings_to_fetch is None


def test_last_n_skips_placeholders_and_future_sittings() -> None:
    targets = SyncPlanner().select_targets(_config(), _fresh_state(), SITTINGS, NOW)

    assert [t.number for t in targets] == [41, 42]
    assert targets[0].kinds == [ResourceKind.VOTINGS, ResourceKind.BALLOTS]


def test_custom_range_is_inclusive() -> None:
    config = _config(range=RangeSelector.custom(40, 41))

    targets = SyncPlanner().select_targets(config, _fresh_state(), SITTINGS, NOW)

    assert [t.number for t in targets] == [40, 41]


def test_sittings_are_scoped_to_missing_kinds() -> None:
    state = _fresh_state(fetched_sittings={
        41: [ResourceKind.VOTINGS, ResourceKind.BALLOTS],
        42: [ResourceKind.VOTINGS],
    })
    config = _config(modules=[ResourceKind.STATEMENTS, ResourceKind.VOTINGS])

    targets = SyncPlanner().select_targets(config, state, SITTINGS, NOW)

    assert [(t.number, t.kinds) for t in targets] == [
        (41, [ResourceKind.STATEMENTS]),
        (42, [ResourceKind.STATEMENTS]),
    ]


def test_missing_ballots_refetch_votings_too() -> None:
    state = _fresh_state(fetched_sittings={42: [ResourceKind.VOTINGS]})
    config = _config(range=RangeSelector.custom(42, 42))

    targets = SyncPlanner().select_targets(config, state, SITTINGS, NOW)

    assert targets[0].kinds == [ResourceKind.VOTINGS, ResourceKind.BALLOTS]


def test_fully_fetched_request_produces_empty_plan() -> None:
    state = _fresh_state(fetched_sittings={
        41: [ResourceKind.VOTINGS, ResourceKind.BALLOTS],
        42: [ResourceKind.VOTINGS, ResourceKind.BALLOTS],
    })

    plan = SyncPlanner().plan(_config(), state, SITTINGS, NOW)

    assert plan.is_empty


def test_force_refetches_everything() -> None:
    state = _fresh_state(fetched_sittings={41: [ResourceKind.VOTINGS, ResourceKind.BALLOTS]})

    plan = SyncPlanner().plan(_config(force=True), state, SITTINGS, NOW)

    assert plan.must_fetch_members
    assert plan.must_fetch_sitting_list


def test_stale_caches_are_refetched() -> None:
    state = _fresh_state(
        members_fetched_at=NOW - timedelta(days=8),
        sitting_list_fetched_at=NOW - timedelta(hours=25),
    )

    plan = SyncPlanner().plan(_config(), state, SITTINGS, NOW)

    assert plan.must_fetch_members
    assert plan.must_fetch_sitting_list


def test_term_only_request_never_needs_the_sitting_list() -> None:
    config = _config(modules=[ResourceKind.INTERPELLATIONS])

    plan = SyncPlanner().plan(config, _fresh_state(), [], NOW)

    assert not plan.must_fetch_sitting_list
    assert plan.sittings_to_fetch == []
    assert plan.term_modules == [ResourceKind.INTERPELLATIONS]


def test_fresh_term_modules_are_skipped_but_parents_cascade() -> None:
    state = _fresh_state(term_modules_fetched_at={
        ResourceKind.COMMITTEES: NOW - timedelta(hours=2),
        ResourceKind.COMMITTEE_SESSIONS: NOW - timedelta(hours=2),
        ResourceKind.INTERPELLATIONS: NOW - timedelta(hours=2),
    })
    config = _config(modules=[ResourceKind.COMMITTEE_STATEMENTS, ResourceKind.INTERPELLATIONS])

    plan = SyncPlanner().plan(config, state, [], NOW)

    assert plan.term_modules == [
        ResourceKind.COMMITTEES,
        ResourceKind.COMMITTEE_SESSIONS,
        ResourceKind.COMMITTEE_STATEMENTS,
    ]


def test_sitting_still_in_progress_waits_for_its_last_day() -> None:
    sittings = [
        SittingTarget(number=41, dates=["2024-01-24"]),
        SittingTarget(number=42, dates=["2024-02-29", "2024-03-01", "2024-03-02"]),
    ]
    planner = SyncPlanner()

    during = planner.select_targets(_config(), _fresh_state(), sittings, NOW)
    after = planner.select_targets(_config(), _fresh_state(), sittings, NOW + timedelta(days=4))

    assert [t.number for t in during] == [41]
    assert [t.number for t in after] == [41, 42]


def test_senate_plan_has_no_members() -> None:
    plan = SyncPlanner().plan(_config(chamber=Chamber.SENAT), SyncState(), [], NOW)

    assert not plan.must_fetch_members
    assert plan.must_fetch_sitting_list


def test_newest_undated_sitting_is_left_unsettled() -> None:
    sittings = [SittingTarget(number=1, dates=[]), SittingTarget(number=2, dates=[])]

    targets = SyncPlanner().select_targets(_config(chamber=Chamber.SENAT), SyncState(), sittings, NOW)

    assert [(t.number, t.settled) for t in targets] == [(1, True), (2, False)]


def test_senate_sync_rejects_sejm_only_modules() -> None:
    with pytest.raises(ValidationError, match="statements"):
        _config(chamber=Chamber.SENAT, modules=[ResourceKind.VOTINGS, ResourceKind.STATEMENTS])
