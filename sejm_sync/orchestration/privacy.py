"""
Privacy filter applied to raw records before normalization.

Drops personal-data fields that the store never needs (phone numbers,
home addresses, personal id numbers, private e-mail) per resource kind.
"""

import logging
from typing import Dict, FrozenSet, List

from ..models.fetch_models import RawRecord
from ..models.sync_models import ResourceKind

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS: Dict[ResourceKind, FrozenSet[str]] = {
    ResourceKind.MEMBERS: frozenset({
        "phone", "telefon",
        "address", "adres",
        "pesel",
        "email_domowy", "homeEmail",
        "email",
    }),
    ResourceKind.INTERPELLATIONS: frozenset({"address", "adres"}),
    ResourceKind.FINANCIAL_DISCLOSURES: frozenset({
        "adres_zamieszkania", "residenceAddress", "address",
    }),
}


def apply_privacy_filter(kind: ResourceKind, records: List[RawRecord]) -> List[RawRecord]:
    """
    Return copies of ``records`` without the sensitive fields of ``kind``.

    Kinds without configured fields are returned unchanged.
    """
    fields = SENSITIVE_FIELDS.get(kind)
    if not fields:
        return records

    filtered = [{k: v for k, v in record.items() if k not in fields} for record in records]
    removed = sum(len(a) - len(b) for a, b in zip(records, filtered))
    if removed:
        logger.debug(f"Privacy filter removed {removed} fields from {kind.value}")
    return filtered
