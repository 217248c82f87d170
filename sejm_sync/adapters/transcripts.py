"""
Transcript (statements) adapter.

Transcript pages are numbered per sitting day with no index endpoint:
/{chamber}/term{N}/proceedings/{sitting}/{date}/transcripts/{page}

Discovery algorithm per sitting day:
1. Fetch page 1; absent means the day has no transcripts.
2. Probe pages 10, 20, 30... (below a hard ceiling) until one is absent.
   Upper bound = last successful probe + 10.
3. Fetch the remaining pages 2..bound in paced concurrent batches.
4. Stop early when a batch yields no statements and more than 20 pages
   have been covered.

Pages downloaded while probing are parsed, not requested again.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..models.fetch_models import FetchIssue, FetchResponse, RawRecord
from ..models.sync_models import ResourceKind, SittingTarget
from ..utils.pacing import get_profile, run_paced_batches
from ..utils.text import collapse_whitespace
from .base_adapter import BaseAdapter, FetchContext
from .transport import FetchError

PROBE_STEP = 10
PAGE_CEILING = 300
EARLY_STOP_AFTER_PAGES = 20
MIN_FRAGMENT_LENGTH = 10

SPEAKER_CLASS = "mowca"


def _is_speaker_heading(element) -> bool:
    return (
        isinstance(element, Tag)
        and element.name == "h2"
        and SPEAKER_CLASS in (element.get("class") or [])
    )


def parse_transcript_html(html: Optional[str]) -> List[Tuple[str, str]]:
    """
    Split a transcript page into (speaker label, text) fragments.

    Each ``<h2 class="mowca">`` heading opens a block that runs until the
    next such heading. Tags are stripped and whitespace collapsed; blocks
    whose text is not longer than MIN_FRAGMENT_LENGTH are noise.
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    fragments: List[Tuple[str, str]] = []

    for heading in soup.find_all(_is_speaker_heading):
        label = collapse_whitespace(heading.get_text(" "))
        if label.endswith(":"):
            label = label[:-1].rstrip()
        if not label:
            continue

        parts: List[str] = []
        for element in heading.next_elements:
            if _is_speaker_heading(element):
                break
            if isinstance(element, NavigableString) and not isinstance(element, Comment):
                if element.parent is not None and element.parent.name in ("script", "style"):
                    continue
                if any(parent is heading for parent in element.parents):
                    continue
                parts.append(str(element))

        text = collapse_whitespace(" ".join(parts))
        if len(text) > MIN_FRAGMENT_LENGTH:
            fragments.append((label, text))

    return fragments


class TranscriptsAdapter(BaseAdapter):
    kind = ResourceKind.STATEMENTS

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        statements: List[RawRecord] = []
        issues: List[FetchIssue] = []

        for sitting in context.sittings_for(self.kind):
            for date in sitting.dates:
                context.check_cancelled()
                day_statements, day_issues = await self.fetch_day(context, sitting, date)
                statements.extend(day_statements)
                issues.extend(day_issues)

        self.logger.info(
            f"Fetched {len(statements)} statements from "
            f"{len(context.sittings_for(self.kind))} sittings"
        )
        return self._build_success_response(statements, issues, start_time, start_requests)

    def page_path(self, context: FetchContext, sitting: int, date: str, page: int) -> str:
        return self.term_path(context, "proceedings", sitting, date, "transcripts", page)

    async def fetch_day(
        self,
        context: FetchContext,
        sitting: SittingTarget,
        date: str,
    ) -> Tuple[List[RawRecord], List[FetchIssue]]:
        """Fetch and parse every transcript page of one sitting day."""
        issues: List[FetchIssue] = []
        pages: Dict[int, str] = {}

        try:
            first = await self.transport.fetch_text(
                self.page_path(context, sitting.number, date, 1)
            )
        except FetchError as e:
            self.logger.warning(f"Transcript page 1 failed for sitting {sitting.number} {date}: {e}")
            return [], [self._issue(e, url=e.url, sitting=sitting.number, date=date)]
        if first is None:
            self.logger.debug(f"No transcripts for sitting {sitting.number} on {date}")
            return [], issues
        pages[1] = first

        bound = PROBE_STEP
        for probe in range(PROBE_STEP, PAGE_CEILING, PROBE_STEP):
            context.check_cancelled()
            try:
                html = await self.transport.fetch_text(
                    self.page_path(context, sitting.number, date, probe)
                )
            except FetchError as e:
                self.logger.warning(f"Probe of page {probe} failed for sitting {sitting.number} {date}: {e}")
                issues.append(self._issue(e, url=e.url, sitting=sitting.number, date=date, page=probe))
                bound = probe - 1
                break
            if html is None:
                break
            pages[probe] = html
            bound = probe + PROBE_STEP

        bound = min(bound, PAGE_CEILING - 1)
        remaining = [n for n in range(2, bound + 1) if n not in pages]
        self.logger.debug(
            f"Sitting {sitting.number} {date}: bound {bound}, "
            f"{len(pages)} pages from probing, {len(remaining)} to fetch"
        )

        async def fetch_page(page: int) -> Optional[str]:
            try:
                return await self.transport.fetch_text(
                    self.page_path(context, sitting.number, date, page)
                )
            except FetchError as e:
                self.logger.warning(f"Transcript page {page} failed: {e}")
                issues.append(self._issue(e, url=e.url, sitting=sitting.number, date=date, page=page))
                return None

        def should_stop(batch: Sequence[int], results: List[Optional[str]]) -> bool:
            parsed = sum(len(parse_transcript_html(html)) for html in results if html)
            return parsed == 0 and max(batch) > EARLY_STOP_AFTER_PAGES

        fetched = await run_paced_batches(
            remaining,
            fetch_page,
            get_profile(context.speed),
            stop_when=should_stop,
            before_batch=context.check_cancelled,
        )
        for page, html in fetched:
            if html is not None:
                pages[page] = html

        statements: List[RawRecord] = []
        for page in sorted(pages):
            for index, (label, text) in enumerate(parse_transcript_html(pages[page])):
                statements.append({
                    "chamber": context.chamber.value,
                    "term": context.term,
                    "sitting": sitting.number,
                    "date": date,
                    "transcriptIndex": page,
                    "fragmentIndex": index,
                    "speaker": label,
                    "text": text,
                })

        return statements, issues
