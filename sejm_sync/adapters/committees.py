"""
Committee adapters: committees -> sessions -> statements cascade.

Committees:  /{chamber}/term{N}/committees
Sessions:    /{chamber}/term{N}/committees/{code}/sittings
Statements:  /{chamber}/term{N}/committees/{code}/sittings/{num}/html

Each stage accepts the run's committee selector: None means all
committees, otherwise only the listed codes.
"""

from typing import List, Optional

from ..models.fetch_models import FetchIssue, FetchResponse, RawRecord
from ..models.sync_models import ResourceKind
from .base_adapter import BaseAdapter, FetchContext
from .transcripts import parse_transcript_html
from .transport import FetchError

# Session transcripts fetched per call
MAX_SESSIONS_PER_CALL = 50


def _selected(code: Optional[str], codes: Optional[List[str]]) -> bool:
    if not code:
        return False
    return codes is None or code.upper() in {c.upper() for c in codes}


def _number(session: RawRecord) -> Optional[int]:
    return session.get("num", session.get("number"))


class CommitteesAdapter(BaseAdapter):
    kind = ResourceKind.COMMITTEES

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        context.check_cancelled()

        try:
            raw = await self.fetch_list(self.term_path(context, "committees"))
        except FetchError as e:
            self.logger.error(f"Failed to fetch committees for term {context.term}: {e}")
            return self._build_failure_response(e, start_time, start_requests, url=e.url)

        committees = [c for c in raw if _selected(c.get("code"), context.committee_codes)]
        self.logger.info(f"Fetched {len(committees)} of {len(raw)} committees")
        return self._build_success_response(committees, [], start_time, start_requests)


class CommitteeSessionsAdapter(BaseAdapter):
    kind = ResourceKind.COMMITTEE_SESSIONS

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        sessions: List[RawRecord] = []
        issues: List[FetchIssue] = []

        committees = [
            c for c in context.prerequisites.get(ResourceKind.COMMITTEES, [])
            if _selected(c.get("code"), context.committee_codes)
        ]
        for committee in committees:
            context.check_cancelled()
            code = committee["code"]
            try:
                raw = await self.fetch_list(self.term_path(context, "committees", code, "sittings"))
            except FetchError as e:
                self.logger.warning(f"Sessions for committee {code} failed: {e}")
                issues.append(self._issue(e, url=e.url, committee=code))
                continue

            for session in raw:
                sessions.append({
                    **session,
                    "committeeCode": code,
                    "term": context.term,
                    "chamber": context.chamber.value,
                })

        self.logger.info(f"Fetched {len(sessions)} sessions from {len(committees)} committees")
        return self._build_success_response(sessions, issues, start_time, start_requests)


class CommitteeStatementsAdapter(BaseAdapter):
    """
    Parses the transcript of each listed committee session.

    Sessions whose statements are already stored are skipped and at most
    MAX_SESSIONS_PER_CALL are parsed per call. When the cap cuts the list
    a deferred issue keeps the module stale, so the next run continues.
    """

    kind = ResourceKind.COMMITTEE_STATEMENTS

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        statements: List[RawRecord] = []
        issues: List[FetchIssue] = []

        sessions = [
            s for s in context.prerequisites.get(ResourceKind.COMMITTEE_SESSIONS, [])
            if _selected(s.get("committeeCode"), context.committee_codes)
            and _number(s) is not None
            and (s["committeeCode"], _number(s)) not in context.stored_committee_sessions
        ]
        if len(sessions) > MAX_SESSIONS_PER_CALL:
            left = len(sessions) - MAX_SESSIONS_PER_CALL
            self.logger.warning(
                f"{len(sessions)} sessions without statements, leaving {left} for the next run"
            )
            issues.append(self._deferred_issue(f"{left} sessions left for the next run", pending=left))
            sessions = sessions[:MAX_SESSIONS_PER_CALL]

        for session in sessions:
            context.check_cancelled()
            code = session["committeeCode"]
            number = _number(session)

            try:
                html = await self.transport.fetch_text(
                    self.term_path(context, "committees", code, "sittings", number, "html")
                )
            except FetchError as e:
                self.logger.warning(f"Transcript of {code} session {number} failed: {e}")
                issues.append(self._issue(e, url=e.url, committee=code, session=number))
                continue

            for index, (label, text) in enumerate(parse_transcript_html(html)):
                statements.append({
                    "committeeCode": code,
                    "sessionNum": number,
                    "term": context.term,
                    "chamber": context.chamber.value,
                    "date": session.get("date"),
                    "fragmentIndex": index,
                    "speaker": label,
                    "text": text,
                })

        self.logger.info(f"Parsed {len(statements)} statements from {len(sessions)} committee sessions")
        return self._build_success_response(statements, issues, start_time, start_requests)
