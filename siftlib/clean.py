"""Clean planning: strip the tags every member of a title-group shares."""
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from utils.filenames import join_filename
from .entries import FileEntry, common_tags
from .plan import Operation, rename_action


@dataclass(frozen=True)
class CleanDecision:
    """The planned outcome for one entry: its effective tags and target name."""
    entry: FileEntry
    tags: Tuple[str, ...]
    clean_filename: str
    operation: Optional[Operation] = None

    @property
    def changed(self) -> bool:
        return self.clean_filename != self.entry.filename


def clean_tags(entries: List[FileEntry]) -> List[Tuple[str, ...]]:
    """Return the effective tag tuple for each entry of one title-group.

    A lone entry needs no disambiguating tags at all. In a larger group every
    tag whose count reaches the group size is removed (all occurrences); the
    rest keep their original order.
    """
    if len(entries) == 1:
        return [()]
    shared = common_tags(entries)
    return [tuple(tag for tag in entry.tags if tag not in shared) for entry in entries]


def plan_clean(entries: List[FileEntry], renamer: Callable[[str, str], None], logger=None,
               on_error: Optional[Callable[[str, Exception], None]] = None) -> List[CleanDecision]:
    """Plan the renames for one title-group.

    Only entries that lose at least one tag are renamed; the others keep
    their on-disk name even if its spacing differs from the canonical join.
    Entries with an empty title are left alone, since dropping their tags
    would leave only the extension.
    """
    decisions = []
    for entry, tags in zip(entries, clean_tags(entries)):
        if not entry.title or tags == entry.tags:
            decisions.append(CleanDecision(entry, entry.tags, entry.filename))
            continue

        target = join_filename(entry.title, tags, entry.extension)
        operation = None
        if target != entry.filename:
            operation = Operation(
                kind='rename',
                title=entry.title,
                entries=(entry,),
                description=f"{entry.filename} -> {target}",
                planned=1,
                action=rename_action(renamer, entry.filename, target, logger=logger, on_error=on_error),
                target=target,
            )
        decisions.append(CleanDecision(entry, tags, target, operation))
    return decisions


def parse_confirmation(response: str, default: bool = True) -> bool:
    """Interpret a yes/no answer; anything unrecognized gives `default`."""
    answer = (response or '').strip().lower()
    if answer in ('y', 'yes'):
        return True
    if answer in ('n', 'no'):
        return False
    return default
