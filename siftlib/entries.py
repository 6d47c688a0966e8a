"""Filename model: parse ROM filenames into title/tags and group them by title."""
import os
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Set, Tuple

from utils.filenames import split_extension, title_from_stem, tags_from_stem


@dataclass(frozen=True)
class FileEntry:
    """One file on disk, as seen by a single directory scan."""
    filename: str
    title: str
    tags: Tuple[str, ...]
    extension: str


def parse_filename(filename: str) -> FileEntry:
    """Parse a raw filename into a `FileEntry`.

    `Game (USA) (Rev 1).bin` gives title `Game`, tags `('USA', 'Rev 1')` and
    extension `.bin`. Any string is accepted; a name without parentheses simply
    has no tags.
    """
    filename = os.path.basename(filename)
    stem, extension = split_extension(filename)
    return FileEntry(
        filename=filename,
        title=title_from_stem(stem),
        tags=tuple(tags_from_stem(stem)),
        extension=extension,
    )


def group_by_title(entries: Iterable[FileEntry]) -> Dict[str, List[FileEntry]]:
    """Group entries by exact title, keeping first-seen order of titles and entries."""
    groups: Dict[str, List[FileEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.title, []).append(entry)
    return groups


def tag_histogram(entries: Iterable[FileEntry]) -> Counter:
    """Count every tag occurrence across `entries` (repeats within a name count twice)."""
    hist: Counter = Counter()
    for entry in entries:
        hist.update(entry.tags)
    return hist


def common_tags(entries: List[FileEntry]) -> Set[str]:
    """Tags whose occurrence count reaches the group size."""
    hist = tag_histogram(entries)
    return {tag for tag, count in hist.items() if count >= len(entries)}
