"""
Paced batch execution for concurrent transcript requests.

A speed profile is a (batch size, inter-batch delay) pair: each batch is
issued concurrently, then the next one waits for the delay. Concurrency
is therefore bounded by the batch size and never unbounded.

Responsibility: Bounded, paced concurrency for page fetching
"""

import asyncio
from dataclasses import dataclass
from typing import (
    Awaitable, Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar
)
import logging

from ..models.sync_models import SpeedProfile

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


@dataclass(frozen=True)
class PacingProfile:
    batch_size: int
    delay_seconds: float


SPEED_PROFILES = {
    SpeedProfile.NORMAL: PacingProfile(batch_size=5, delay_seconds=0.100),
    SpeedProfile.FAST: PacingProfile(batch_size=10, delay_seconds=0.050),
    SpeedProfile.RISKY: PacingProfile(batch_size=13, delay_seconds=0.025),
}


def get_profile(speed: SpeedProfile | str) -> PacingProfile:
    """Look up a profile by enum or name; unknown names fall back to normal."""
    try:
        return SPEED_PROFILES[SpeedProfile(speed)]
    except ValueError:
        logger.warning(f"Unknown speed profile {speed!r}, using normal")
        return SPEED_PROFILES[SpeedProfile.NORMAL]


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


async def run_paced_batches(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    profile: PacingProfile,
    stop_when: Optional[Callable[[Sequence[T], List[R]], bool]] = None,
    before_batch: Optional[Callable[[], None]] = None,
) -> List[Tuple[T, R]]:
    """
    Run ``worker`` over ``items`` one concurrent batch at a time.

    Args:
        items: Work items, processed in order
        worker: Async function applied to each item
        profile: Batch size and delay between batches
        stop_when: Called with (batch, results) after each batch; True stops
        before_batch: Called before each batch, e.g. a cancellation check

    Returns:
        (item, result) pairs for every item that was processed
    """
    pending = list(items)
    completed: List[Tuple[T, R]] = []

    for index, batch in enumerate(chunked(pending, max(profile.batch_size, 1))):
        if before_batch:
            before_batch()
        if index > 0 and profile.delay_seconds > 0:
            await asyncio.sleep(profile.delay_seconds)

        results = await asyncio.gather(*(worker(item) for item in batch))
        completed.extend(zip(batch, results))

        if stop_when and stop_when(batch, list(results)):
            break

    return completed
