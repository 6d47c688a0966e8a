"""Sift planning: decide which duplicates of a title survive.

The non-interactive path uses a keep policy, a function
`policy(entries, stat) -> set of indices to keep`. The interactive path asks
the user for a comma-separated list of 1-based indices.
"""
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from utils.constants import DEFAULT_REGION_PRIORITY
from .entries import FileEntry
from .plan import Operation, delete_action

KeepPolicy = Callable[[List[FileEntry], Callable], Set[int]]


@dataclass(frozen=True)
class SiftDecision:
    entry: FileEntry
    keep: bool


@dataclass(frozen=True)
class SiftPlan:
    title: str
    decisions: Tuple[SiftDecision, ...]
    remove_count: int
    operation: Optional[Operation] = None

    @property
    def kept(self) -> List[FileEntry]:
        return [d.entry for d in self.decisions if d.keep]


def _stat_value(stat, filename: str, field: str) -> float:
    """Read one stat field, treating unreadable files as -1 so planning never fails."""
    if stat is None:
        return -1
    try:
        return getattr(stat(filename), field)
    except OSError:
        return -1


def _best_index(entries: List[FileEntry], score) -> Set[int]:
    # max() keeps the first of equal scores, so ties go to the earliest entry
    if not entries:
        return set()
    best = max(range(len(entries)), key=lambda i: score(entries[i]))
    return {best}


def keep_first(entries: List[FileEntry], stat=None) -> Set[int]:
    return {0} if entries else set()


def keep_all(entries: List[FileEntry], stat=None) -> Set[int]:
    return set(range(len(entries)))


def keep_largest(entries: List[FileEntry], stat=None) -> Set[int]:
    return _best_index(entries, lambda e: _stat_value(stat, e.filename, 'st_size'))


def keep_newest(entries: List[FileEntry], stat=None) -> Set[int]:
    return _best_index(entries, lambda e: _stat_value(stat, e.filename, 'st_mtime'))


def keep_fewest_tags(entries: List[FileEntry], stat=None) -> Set[int]:
    """Prefer the plainest name: fewest tags, then the shortest filename."""
    return _best_index(entries, lambda e: (-len(e.tags), -len(e.filename)))


def region_rank(entry: FileEntry, region_priority: Sequence[str]) -> int:
    """Rank of the entry's best region tag (0 is best); unknown regions rank last.

    Region tags may list several regions, e.g. `(USA, Europe)`.
    """
    ranks = {region.lower(): i for i, region in enumerate(region_priority)}
    best = len(region_priority)
    for tag in entry.tags:
        for part in re.split(r'\s*,\s*', tag.strip()):
            rank = ranks.get(part.lower())
            if rank is not None and rank < best:
                best = rank
    return best


def make_region_policy(region_priority: Optional[Sequence[str]] = None) -> KeepPolicy:
    """Build a policy keeping the entry from the most preferred region."""
    priority = list(region_priority or DEFAULT_REGION_PRIORITY)

    def keep_region(entries: List[FileEntry], stat=None) -> Set[int]:
        return _best_index(entries, lambda e: -region_rank(e, priority))
    return keep_region


KEEP_POLICIES: Dict[str, KeepPolicy] = {
    'first': keep_first,
    'largest': keep_largest,
    'newest': keep_newest,
    'fewest-tags': keep_fewest_tags,
    'region': make_region_policy(),
    'all': keep_all,
}


def get_keep_policy(name: str, region_priority: Optional[Sequence[str]] = None) -> KeepPolicy:
    """Look up a keep policy by name; raises ValueError for unknown names."""
    if name == 'region' and region_priority:
        return make_region_policy(region_priority)
    try:
        return KEEP_POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown keep policy: {name!r} (choose from {', '.join(KEEP_POLICIES)})")


def parse_keep_selection(response: str, count: int) -> Set[int]:
    """Turn a user's `1,3`-style answer into a set of 0-based indices to keep.

    `0` anywhere keeps nothing. Tokens that are not integers, or that fall
    outside 1..count, are ignored. If nothing usable remains, every entry is
    kept.
    """
    values = []
    for token in (response or '').split(','):
        try:
            values.append(int(token.strip()))
        except ValueError:
            continue

    if 0 in values:
        return set()
    selected = {v - 1 for v in values if 1 <= v <= count}
    if not selected:
        return set(range(count))
    return selected


def prompt_keep_selection(title: str, entries: List[FileEntry], prompt: Callable[[str], str] = input,
                          show: Callable[[str], None] = print) -> Set[int]:
    """Show the numbered files of one title and ask which to keep."""
    show(f"{title} ({len(entries)} files):")
    for i, entry in enumerate(entries, start=1):
        show(f"  {i}. {entry.filename}")
    response = prompt("Files to keep (comma-separated, 0 for none, blank for all): ")
    return parse_keep_selection(response, len(entries))


def plan_sift(entries: List[FileEntry], select: Callable[[List[FileEntry]], Iterable[int]],
              remover: Callable[[str], None], logger=None,
              on_error: Optional[Callable[[str, Exception], None]] = None) -> SiftPlan:
    """Plan the deletes for one title-group.

    `select(entries)` returns the indices to keep; everything else is removed
    by a single deferred delete operation. No operation is planned when
    nothing would be removed.
    """
    keep = set(select(entries))
    decisions = tuple(SiftDecision(entry, i in keep) for i, entry in enumerate(entries))
    removed = [d.entry for d in decisions if not d.keep]
    title = entries[0].title if entries else ''

    if logger:
        kept_names = ', '.join(d.entry.filename for d in decisions if d.keep) or 'none'
        logger.info(f"Sift {title!r}: keeping {kept_names}; removing {len(removed)} of {len(entries)}")

    operation = None
    if removed:
        operation = Operation(
            kind='delete',
            title=title,
            entries=tuple(removed),
            description=', '.join(e.filename for e in removed),
            planned=len(removed),
            action=delete_action(remover, [e.filename for e in removed], logger=logger, on_error=on_error),
        )
    return SiftPlan(title=title, decisions=decisions, remove_count=len(removed), operation=operation)
