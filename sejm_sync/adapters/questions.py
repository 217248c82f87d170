"""
Interpellation and written-question adapters.

Both are offset-paginated list endpoints sharing one response shape:
/{chamber}/term{N}/interpellations and /{chamber}/term{N}/writtenQuestions
"""

from ..models.fetch_models import FetchResponse, RawRecord
from ..models.sync_models import ResourceKind
from .base_adapter import BaseAdapter, FetchContext

PAGE_SIZE = 500


class _QuestionsAdapter(BaseAdapter):
    endpoint: str

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()

        records, issues = await self.fetch_paginated(
            self.term_path(context, self.endpoint),
            context,
            page_size=PAGE_SIZE,
            params={"sort_by": "-lastModified"},
        )
        for record in records:
            record.setdefault("term", context.term)

        self.logger.info(f"Fetched {len(records)} {self.endpoint} for term {context.term}")
        return self._build_success_response(records, issues, start_time, start_requests)


class InterpellationsAdapter(_QuestionsAdapter):
    kind = ResourceKind.INTERPELLATIONS
    endpoint = "interpellations"


class WrittenQuestionsAdapter(_QuestionsAdapter):
    kind = ResourceKind.WRITTEN_QUESTIONS
    endpoint = "writtenQuestions"
