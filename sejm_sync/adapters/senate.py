"""
Senate votings adapters.

The Senate publishes no JSON API. Its voting results are listed in an XML
catalog (``ApiConfig.senate_catalog_url``) whose resources point to one
CSV file per voting, with each senator's vote:

    "Ustawa o zmianie ustawy o ..."
    głosowało : 96, za: 51, przeciw: 44, wstrzymało się: 1
    Senator,Głos
    Jan Kowalski,za
    ...

Sittings come from the catalog alone and carry no dates. Ballots are
expanded from the votings' CSV rows, so they need no requests of their own.
"""

import csv
import hashlib
import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from bs4 import BeautifulSoup

from ..models.fetch_models import FetchIssue, FetchResponse, RawRecord
from ..models.sync_models import ResourceKind
from ..utils.pacing import get_profile, run_paced_batches
from ..utils.text import collapse_whitespace, fold_diacritics, normalize_name
from .base_adapter import BaseAdapter, FetchContext
from .transport import FetchError, SejmTransport

# Term number -> directory used in the catalog's file URLs
SENATE_TERM_PATHS = {
    11: "kadencja_10",
}

_ID_PATTERNS = (
    re.compile(r"Posiedzenie_(\d+)_dzien_(\d+)_glosowanie_(\d+)", re.IGNORECASE),
    re.compile(r"pos_(\d+)_dz_(\d+)_glos_(\d+)", re.IGNORECASE),
)

_HEADER = re.compile(r"^\"?senator\"?\s*([,;])\s*\"?glos", re.IGNORECASE)
_YES = re.compile(r"\bza\s*:\s*(\d+)")
_NO = re.compile(r"\bprzeciw\s*:\s*(\d+)")
_ABSTAIN = re.compile(r"\bwstrzymal[oa]?\s*(?:sie)?\s*:\s*(\d+)")
_VOTED = re.compile(r"\bglosowal[oa]?\s*:\s*(\d+)")


@dataclass(frozen=True)
class SenateVotingResource:
    """One published per-voting CSV file of the catalog."""

    url: str
    sitting: int
    day: int
    number: int
    title: str = ""
    description: str = ""


def parse_resource_ids(text: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """(sitting, day, voting number) from a file URL or catalog identifier."""
    for pattern in _ID_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return int(match.group(1)), int(match.group(2)), int(match.group(3))
    return None


def _localized(resource, name: str) -> str:
    element = resource.find(name)
    if element is None:
        return ""
    polish = element.find("polish")
    return collapse_whitespace((polish if polish is not None else element).get_text())


def parse_catalog(xml: str, term_path: str) -> List[SenateVotingResource]:
    """
    Published per-senator CSV resources of one term.

    Args:
        xml: Catalog document
        term_path: Directory of the term in file URLs, e.g. "kadencja_10"

    Returns:
        Resources ordered by sitting, day and voting number
    """
    soup = BeautifulSoup(xml, "lxml-xml")
    resources: List[SenateVotingResource] = []

    for resource in soup.find_all("resource", status="published"):
        url_tag = resource.find("url")
        url = url_tag.get_text(strip=True) if url_tag is not None else ""
        if term_path not in url or not url.endswith("_imie.csv"):
            continue

        ident = resource.find("extIdent")
        ids = parse_resource_ids(url) or parse_resource_ids(ident.get_text() if ident is not None else None)
        if ids is None:
            continue

        resources.append(SenateVotingResource(
            url=url,
            sitting=ids[0],
            day=ids[1],
            number=ids[2],
            title=_localized(resource, "title"),
            description=_localized(resource, "description"),
        ))

    resources.sort(key=lambda r: (r.sitting, r.day, r.number))
    return resources


def _count(pattern: re.Pattern, text: str) -> int:
    match = pattern.search(text)
    return int(match.group(1)) if match else 0


def parse_votes_csv(text: str, resource: SenateVotingResource) -> Optional[RawRecord]:
    """
    Parse one voting's CSV into a voting record with its ``votes`` rows.

    Returns:
        Voting record, or None when the file has no votes section
    """
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
    if len(lines) < 4:
        return None

    title = lines[0].strip('"').strip() or resource.title
    summary = fold_diacritics(lines[1]).lower()
    yes, no = _count(_YES, summary), _count(_NO, summary)
    abstain = _count(_ABSTAIN, summary)

    start, delimiter = 2, ","
    for index, line in enumerate(lines[:5]):
        header = _HEADER.match(fold_diacritics(line))
        if header:
            start, delimiter = index + 1, header.group(1)
            break

    votes = []
    for row in csv.reader(lines[start:], delimiter=delimiter):
        if len(row) < 2:
            continue
        name, vote = collapse_whitespace(row[0]), collapse_whitespace(row[1])
        if name and vote:
            votes.append({"senator": name, "vote": vote})

    return {
        "sitting": resource.sitting,
        "day": resource.day,
        "votingNumber": resource.number,
        "title": title,
        "description": resource.description or title,
        "yes": yes,
        "no": no,
        "abstain": abstain,
        "totalVoted": _count(_VOTED, summary) or yes + no + abstain,
        "result": "przyjęto" if yes > no else "odrzucono",
        "url": resource.url,
        "votes": votes,
    }


def senator_id(name: str) -> str:
    """Stable synthetic member id for a senator known only by name."""
    digest = hashlib.sha1(normalize_name(name).encode("utf-8")).hexdigest()
    return f"S{digest[:12]}"


class SenateCatalog:
    """
    Fetches the voting catalog once per run and serves it by term.

    Shared by the Senate sittings and votings adapters.
    """

    def __init__(self, transport: SejmTransport):
        self.transport = transport
        self._xml: Optional[str] = None

    @property
    def url(self) -> str:
        return self.transport.config.senate_catalog_url

    async def resources(self, term: int) -> List[SenateVotingResource]:
        """
        Raises:
            FetchError: If the term is not published or the catalog is unavailable
        """
        term_path = SENATE_TERM_PATHS.get(term)
        if term_path is None:
            raise FetchError(self.url, None, f"no Senate voting catalog for term {term}")

        if self._xml is None:
            xml = await self.transport.fetch_text(self.url)
            if xml is None:
                raise FetchError(self.url, 404, "Senate voting catalog not found")
            self._xml = xml
        return parse_catalog(self._xml, term_path)


class SenateSittingsAdapter(BaseAdapter):
    kind = ResourceKind.SITTINGS

    def __init__(self, transport: SejmTransport, catalog: SenateCatalog):
        super().__init__(transport, source_name="senate_sittings")
        self.catalog = catalog

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        context.check_cancelled()

        try:
            resources = await self.catalog.resources(context.term)
        except FetchError as e:
            self.logger.error(f"Failed to list Senate sittings for term {context.term}: {e}")
            return self._build_failure_response(e, start_time, start_requests, url=e.url)

        numbers = sorted({r.sitting for r in resources if r.sitting > 0})
        sittings = [{"number": number, "dates": []} for number in numbers]

        self.logger.info(f"Found {len(sittings)} Senate sittings in {len(resources)} catalog files")
        return self._build_success_response(sittings, [], start_time, start_requests)


class SenateVotingsAdapter(BaseAdapter):
    kind = ResourceKind.VOTINGS

    def __init__(self, transport: SejmTransport, catalog: SenateCatalog):
        super().__init__(transport, source_name="senate_votings")
        self.catalog = catalog

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        context.check_cancelled()
        votings: List[RawRecord] = []
        issues: List[FetchIssue] = []

        try:
            resources = await self.catalog.resources(context.term)
        except FetchError as e:
            self.logger.error(f"Senate voting catalog unavailable: {e}")
            return self._build_failure_response(e, start_time, start_requests, url=e.url)

        by_sitting: Dict[int, List[SenateVotingResource]] = defaultdict(list)
        for resource in resources:
            by_sitting[resource.sitting].append(resource)

        pending = [r for s in context.sittings_for(self.kind) for r in by_sitting.get(s.number, [])]

        async def fetch_one(resource: SenateVotingResource) -> Union[Optional[str], FetchError]:
            try:
                return await self.transport.fetch_text(resource.url)
            except FetchError as e:
                return e

        results = await run_paced_batches(
            pending,
            fetch_one,
            get_profile(context.speed),
            before_batch=context.check_cancelled,
        )

        for resource, result in results:
            if isinstance(result, FetchError):
                self.logger.warning(
                    f"Votes of sitting {resource.sitting} voting {resource.number} failed: {result}"
                )
                issues.append(self._issue(
                    result, url=result.url, sitting=resource.sitting, voting=resource.number,
                ))
                continue

            voting = parse_votes_csv(result, resource) if result is not None else None
            if voting is None:
                self.logger.warning(f"No votes in {resource.url}")
                continue
            votings.append({**voting, "term": context.term, "chamber": context.chamber.value})

        self.logger.info(f"Fetched {len(votings)} Senate votings from {len(pending)} files")
        return self._build_success_response(votings, issues, start_time, start_requests)


class SenateBallotsAdapter(BaseAdapter):
    kind = ResourceKind.BALLOTS

    def __init__(self, transport: SejmTransport):
        super().__init__(transport, source_name="senate_ballots")

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        context.check_cancelled()

        wanted = {s.number for s in context.sittings_for(self.kind)}
        ballots: List[RawRecord] = []
        for voting in context.prerequisites.get(ResourceKind.VOTINGS, []):
            if wanted and voting.get("sitting") not in wanted:
                continue
            for vote in voting.get("votes") or []:
                ballots.append({
                    "chamber": context.chamber.value,
                    "term": context.term,
                    "sitting": voting.get("sitting"),
                    "votingNumber": voting.get("votingNumber"),
                    "personId": senator_id(vote["senator"]),
                    "senator": vote["senator"],
                    "vote": vote["vote"],
                })

        self.logger.info(f"Expanded {len(ballots)} Senate ballots")
        return self._build_success_response(ballots, [], start_time, start_requests)
