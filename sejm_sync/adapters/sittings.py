"""
Sittings adapter.

Fetches the sitting list of a term: /{chamber}/term{N}/proceedings.
Placeholder sittings (number <= 0) are dropped here so that no
downstream fetch is ever planned for them.
"""

from typing import Any

from ..models.fetch_models import FetchResponse, RawRecord
from ..models.sync_models import ResourceKind
from .base_adapter import BaseAdapter, FetchContext
from .transport import FetchError


def sitting_number(raw: RawRecord) -> int:
    """Sitting number from a raw record, 0 when missing or malformed."""
    value: Any = raw.get("number", raw.get("num", raw.get("sitting")))
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class SittingsAdapter(BaseAdapter):
    kind = ResourceKind.SITTINGS

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        context.check_cancelled()

        path = self.term_path(context, "proceedings")
        try:
            raw = await self.fetch_list(path)
        except FetchError as e:
            self.logger.error(f"Failed to fetch sitting list for term {context.term}: {e}")
            return self._build_failure_response(e, start_time, start_requests, url=e.url)

        sittings = [s for s in raw if isinstance(s, dict) and sitting_number(s) > 0]
        dropped = len(raw) - len(sittings)
        if dropped:
            self.logger.debug(f"Dropped {dropped} placeholder sittings")

        self.logger.info(f"Fetched {len(sittings)} sittings for term {context.term}")
        return self._build_success_response(sittings, [], start_time, start_requests)
