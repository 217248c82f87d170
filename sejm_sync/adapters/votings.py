"""
Votings and ballots adapters.

Votings:  /{chamber}/term{N}/votings/{sitting}
Ballots:  /{chamber}/term{N}/votings/{sitting}/{votingNumber}  (``votes`` array)

Ballot fetching depends on the votings list produced earlier in the run.
"""

from typing import Dict, List

from ..models.fetch_models import FetchIssue, FetchResponse, RawRecord
from ..models.sync_models import ResourceKind
from .base_adapter import BaseAdapter, FetchContext
from .transport import FetchError

# Ballot detail requests per sitting and call
MAX_VOTINGS_PER_SITTING = 100


class VotingsAdapter(BaseAdapter):
    kind = ResourceKind.VOTINGS

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        votings: List[RawRecord] = []
        issues: List[FetchIssue] = []

        for sitting in context.sittings_for(self.kind):
            context.check_cancelled()
            try:
                raw = await self.fetch_list(self.term_path(context, "votings", sitting.number))
            except FetchError as e:
                self.logger.warning(f"Votings for sitting {sitting.number} failed: {e}")
                issues.append(self._issue(e, url=e.url, sitting=sitting.number))
                continue

            for voting in raw:
                votings.append({
                    **voting,
                    "sitting": voting.get("sitting", sitting.number),
                    "term": context.term,
                    "chamber": context.chamber.value,
                })

        self.logger.info(f"Fetched {len(votings)} votings")
        return self._build_success_response(votings, issues, start_time, start_requests)


class BallotsAdapter(BaseAdapter):
    """
    Fetches the per-member ballots of each listed voting.

    Votings whose ballots are already stored are skipped, and at most
    MAX_VOTINGS_PER_SITTING are fetched per sitting. A sitting cut by the
    cap gets a deferred issue, so it stays unmarked and the next run
    continues with its remaining votings.
    """

    kind = ResourceKind.BALLOTS

    async def fetch(self, context: FetchContext) -> FetchResponse[RawRecord]:
        start_time, start_requests = self._start()
        ballots: List[RawRecord] = []
        issues: List[FetchIssue] = []

        pending = self._pending_by_sitting(context)
        fetched = 0
        for sitting, numbers in pending.items():
            if len(numbers) > MAX_VOTINGS_PER_SITTING:
                left = len(numbers) - MAX_VOTINGS_PER_SITTING
                self.logger.warning(
                    f"Sitting {sitting}: {len(numbers)} votings without ballots, "
                    f"leaving {left} for the next run"
                )
                issues.append(self._deferred_issue(
                    f"{left} votings left for the next run", sitting=sitting, pending=left,
                ))
                numbers = numbers[:MAX_VOTINGS_PER_SITTING]

            for number in numbers:
                context.check_cancelled()
                try:
                    detail = await self.transport.fetch_json(
                        self.term_path(context, "votings", sitting, number)
                    )
                except FetchError as e:
                    self.logger.warning(f"Ballots for voting {sitting}/{number} failed: {e}")
                    issues.append(self._issue(e, url=e.url, sitting=sitting, voting=number))
                    continue

                fetched += 1
                votes = detail.get("votes") if isinstance(detail, dict) else None
                for vote in votes or []:
                    ballots.append({
                        **vote,
                        "term": context.term,
                        "chamber": context.chamber.value,
                        "sitting": sitting,
                        "votingNumber": number,
                    })

        self.logger.info(f"Fetched {len(ballots)} ballots from {fetched} votings")
        return self._build_success_response(ballots, issues, start_time, start_requests)

    def _pending_by_sitting(self, context: FetchContext) -> Dict[int, List[int]]:
        wanted = {s.number for s in context.sittings_for(self.kind)}
        pending: Dict[int, List[int]] = {}
        for voting in context.prerequisites.get(ResourceKind.VOTINGS, []):
            sitting = voting.get("sitting")
            number = voting.get("votingNumber", voting.get("number"))
            if sitting is None or number is None:
                continue
            if wanted and sitting not in wanted:
                continue
            if (sitting, number) in context.stored_ballot_votings:
                continue
            pending.setdefault(sitting, []).append(number)
        return pending
