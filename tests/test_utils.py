import asyncio

import pytest

from sejm_sync.utils.dedupe import dedupe_by_key
from sejm_sync.utils.pacing import PacingProfile, get_profile, run_paced_batches
from sejm_sync.utils.retry import calculate_backoff
from sejm_sync.utils.text import fold_diacritics, normalize_name


def test_dedupe_by_key_keeps_last_value_in_first_position() -> None:
    rows = [
        {"id": "a", "title": "Old"},
        {"id": "b", "title": "Other"},
        {"id": "a", "title": "New"},
    ]

    unique, duplicates = dedupe_by_key(rows, lambda r: r["id"])

    assert duplicates == 1
    assert unique == [{"id": "a", "title": "New"}, {"id": "b", "title": "Other"}]


def test_dedupe_by_key_drops_rows_without_key() -> None:
    unique, duplicates = dedupe_by_key([{"id": None}, {"id": "x"}], lambda r: r["id"])

    assert duplicates == 0
    assert unique == [{"id": "x"}]


def test_backoff_is_linear_and_capped() -> None:
    assert calculate_backoff(1, base_delay=0.5) == 0.5
    assert calculate_backoff(3, base_delay=0.5) == 1.5
    assert calculate_backoff(100, base_delay=0.5, max_delay=30.0) == 30.0


def test_speed_profiles() -> None:
    assert get_profile("normal") == PacingProfile(batch_size=5, delay_seconds=0.1)
    assert get_profile("risky").batch_size == 13


def test_fold_diacritics_handles_polish_letters() -> None:
    assert fold_diacritics("Łódź, Wiśniewski, Żółć") == "Lodz, Wisniewski, Zolc"
    assert normalize_name("  Szymon   HOŁOWNIA ") == "szymon holownia"


@pytest.mark.asyncio
async def test_paced_batches_run_concurrently_and_stop_early() -> None:
    active = 0
    peak = 0

    async def worker(item: int) -> int:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0)
        active -= 1
        return item * 10

    results = await run_paced_batches(
        range(1, 12),
        worker,
        PacingProfile(batch_size=3, delay_seconds=0.0),
        stop_when=lambda batch, res: max(batch) >= 6,
    )

    assert results == [(n, n * 10) for n in range(1, 7)]
    assert peak == 3
