"""
Speaker resolution: free-text transcript headings -> member ids.

A heading such as "Wicemarszałek Poseł Jan Kowalski (PiS):" is reduced
to a bare name by stripping positional prefixes and role tokens, then
matched against the member roster: exact normalized full name first,
then surname containment. An unmatched heading is expected (guests,
"Głos z sali") and only counted.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..utils.text import collapse_whitespace, normalize_name

POSITION_PREFIX = re.compile(
    r"^(marszałek senior|marszałek sejmu|marszałek senatu|marszałek|wicemarszałek|"
    r"sekretarz poseł|sekretarz|deputy speaker|speaker|secretary)\b\s*",
    re.IGNORECASE,
)

ROLE_PREFIX = re.compile(
    r"^(poseł sprawozdawca|posłanka sprawozdawczyni|poseł|posłanka|senator|senatorka|"
    r"sekretarz stanu|podsekretarz stanu|prezes rady ministrów|wiceprezes rady ministrów|"
    r"wiceminister|minister|prezes|rzecznik|przewodniczący|przewodnicząca|"
    r"member|deputy)\b\s*",
    re.IGNORECASE,
)

PARENTHESIZED_SUFFIX = re.compile(r"\s*\([^)]*\)\s*$")


def bare_name(label: str) -> str:
    """
    Strip positions, roles, a trailing colon and parenthesized suffixes.

    Example:
        >>> bare_name("Poseł Jan Kowalski (KO):")
        'Jan Kowalski'
    """
    name = collapse_whitespace(label).rstrip(":").strip()
    previous = None
    while previous != name:
        previous = name
        name = PARENTHESIZED_SUFFIX.sub("", name).rstrip(":").strip()
        name = POSITION_PREFIX.sub("", name)
        name = ROLE_PREFIX.sub("", name)
    return name.strip()


@dataclass
class SpeakerStats:
    matched: int = 0
    unmatched: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {"matched": self.matched, "unmatched": self.unmatched}


@dataclass(frozen=True)
class RosterEntry:
    person_id: str
    first_name: str
    last_name: str
    full_name: str
    club: Optional[str]


def _entry(member: Any) -> Optional[RosterEntry]:
    get = member.get if isinstance(member, dict) else lambda k: getattr(member, k, None)
    person_id = get("person_id")
    if person_id is None:
        return None
    first = normalize_name(get("first_name") or "")
    last = normalize_name(get("last_name") or "")
    full = normalize_name(get("full_name") or f"{first} {last}")
    return RosterEntry(str(person_id), first, last, full, get("club"))


class SpeakerResolver:
    """
    Example:
        resolver = SpeakerResolver(roster)
        member_id, club = resolver.resolve("Poseł Jan Kowalski:")
        resolver.stats.as_dict()  # {"matched": 1, "unmatched": 0}
    """

    def __init__(self, roster: Iterable[Any]):
        self.entries: List[RosterEntry] = [e for e in map(_entry, roster) if e]
        self.by_full_name: Dict[str, RosterEntry] = {}
        for entry in self.entries:
            self.by_full_name.setdefault(entry.full_name, entry)
            self.by_full_name.setdefault(f"{entry.first_name} {entry.last_name}", entry)
        self.stats = SpeakerStats()

    def match(self, label: str) -> Optional[RosterEntry]:
        """Resolve without touching the statistics."""
        name = normalize_name(bare_name(label))
        if not name:
            return None

        exact = self.by_full_name.get(name)
        if exact:
            return exact

        words = set(name.split(" "))
        candidates = [e for e in self.entries if e.last_name and e.last_name in name and (
            e.last_name in words or " " in e.last_name
        )]
        if len(candidates) == 1:
            return candidates[0]
        with_first = [e for e in candidates if e.first_name and e.first_name in words]
        if with_first:
            return with_first[0]
        return None

    def resolve(self, label: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Returns:
            (member_id, club), both None when the label does not match
        """
        entry = self.match(label)
        if entry is None:
            self.stats.unmatched += 1
            return None, None
        self.stats.matched += 1
        return entry.person_id, entry.club
