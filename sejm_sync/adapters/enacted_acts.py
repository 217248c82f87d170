"""
Enacted acts adapter (ELI).

/eli/acts/{publisher}/{year} returns ``{"count": N, "items": [...]}`` and
accepts offset/limit paging. Publisher is DU (Journal of Laws) or MP
(Monitor Polski).
"""

from datetime import date

from ..models.fetch_models import FetchResponse, RawRecord
from ..models.sync_models import ResourceKind
from .base_adapter import BaseAdapter, FetchContext

PAGE_SIZE = 500


class EnactedActsAdapter(BaseAdapter):
    kind = ResourceKind.ENACTED_ACTS

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        publisher = context.enacted_acts_publisher
        year = context.enacted_acts_year or date.today().year

        acts, issues = await self.fetch_paginated(
            f"/eli/acts/{publisher}/{year}",
            context,
            page_size=PAGE_SIZE,
        )
        for act in acts:
            act.setdefault("publisher", publisher)
            act.setdefault("year", year)

        self.logger.info(f"Fetched {len(acts)} acts from {publisher} {year}")
        return self._build_success_response(acts, issues, start_time, start_requests)
