"""
Utilities package for sejm-sync.

This package contains reusable helpers for:
- Retry logic and rate-limit cooldowns
- Paced batch concurrency (speed profiles)
- Record deduplication
- Text normalization
"""

from .retry import (
    retry_async,
    calculate_backoff,
    is_retryable_error,
    is_rate_limited,
    RetryError,
)
from .pacing import PacingProfile, SPEED_PROFILES, get_profile, run_paced_batches
from .dedupe import dedupe_by_key
from .text import collapse_whitespace, fold_diacritics, normalize_name

__all__ = [
    "retry_async",
    "calculate_backoff",
    "is_retryable_error",
    "is_rate_limited",
    "RetryError",
    "PacingProfile",
    "SPEED_PROFILES",
    "get_profile",
    "run_paced_batches",
    "dedupe_by_key",
    "collapse_whitespace",
    "fold_diacritics",
    "normalize_name",
]
