"""
Legislative drafts adapter: parliamentary prints, /{chamber}/term{N}/prints
"""

from ..models.fetch_models import FetchResponse, RawRecord
from ..models.sync_models import ResourceKind
from .base_adapter import BaseAdapter, FetchContext
from .transport import FetchError


class LegislativeDraftsAdapter(BaseAdapter):
    kind = ResourceKind.LEGISLATIVE_DRAFTS

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        context.check_cancelled()

        try:
            prints = await self.fetch_list(self.term_path(context, "prints"))
        except FetchError as e:
            self.logger.error(f"Failed to fetch prints for term {context.term}: {e}")
            return self._build_failure_response(e, start_time, start_requests, url=e.url)

        for record in prints:
            record.setdefault("term", context.term)

        self.logger.info(f"Fetched {len(prints)} prints for term {context.term}")
        return self._build_success_response(prints, [], start_time, start_requests)
