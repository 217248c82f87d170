"""
Normalizers: per-kind pure transforms from raw API records to rows,
plus the Normalizer that persists them with idempotent upserts.
"""

from .base import NormalizeContext
from .fields import pick
from .normalizer import KIND_SPECS, Normalizer
from .speakers import SpeakerResolver, SpeakerStats, bare_name

__all__ = [
    "NormalizeContext",
    "pick",
    "KIND_SPECS",
    "Normalizer",
    "SpeakerResolver",
    "SpeakerStats",
    "bare_name",
]
