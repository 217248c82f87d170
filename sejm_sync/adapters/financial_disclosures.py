"""
Financial disclosures adapter.

Per member: /{chamber}/term{N}/MP/{id}/financialDisclosures. A 404 means
the member has no published disclosures and is not an error.
"""

from typing import List

from ..models.fetch_models import FetchIssue, FetchResponse, RawRecord
from ..models.sync_models import ResourceKind
from .base_adapter import BaseAdapter, FetchContext
from .transport import FetchError


class FinancialDisclosuresAdapter(BaseAdapter):
    kind = ResourceKind.FINANCIAL_DISCLOSURES

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        disclosures: List[RawRecord] = []
        issues: List[FetchIssue] = []

        member_ids = list(context.member_ids)
        members = context.prerequisites.get(ResourceKind.MEMBERS)
        if members:
            member_ids = [str(m["id"]) for m in members if m.get("id") is not None]

        for person_id in member_ids:
            context.check_cancelled()
            try:
                raw = await self.transport.fetch_json(
                    self.term_path(context, "MP", person_id, "financialDisclosures")
                )
            except FetchError as e:
                if e.is_not_found:
                    continue
                self.logger.warning(f"Disclosures for member {person_id} failed: {e}")
                issues.append(self._issue(e, url=e.url, member=person_id))
                continue

            for index, record in enumerate(raw if isinstance(raw, list) else []):
                disclosures.append({**record, "personId": person_id, "index": index})

        self.logger.info(f"Fetched {len(disclosures)} disclosures for {len(member_ids)} members")
        return self._build_success_response(disclosures, issues, start_time, start_requests)
