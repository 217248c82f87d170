"""
Members adapter.

Fetches the full member roster of a term: /{chamber}/term{N}/MP
"""

from ..models.fetch_models import FetchResponse, RawRecord
from ..models.sync_models import ResourceKind
from .base_adapter import BaseAdapter, FetchContext
from .transport import FetchError


class MembersAdapter(BaseAdapter):
    kind = ResourceKind.MEMBERS

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        context.check_cancelled()

        path = self.term_path(context, "MP")
        try:
            members = await self.fetch_list(path)
        except FetchError as e:
            self.logger.error(f"Failed to fetch members for term {context.term}: {e}")
            return self._build_failure_response(e, start_time, start_requests, url=e.url)

        self.logger.info(f"Fetched {len(members)} members for term {context.term}")
        return self._build_success_response(members, [], start_time, start_requests)
