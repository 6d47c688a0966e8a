import os
import re
from typing import Iterable, List, Tuple

# A tag is a maximal run of non-parenthesis characters between a matched pair
TAG_PATTERN = re.compile(r'\(([^()]+)\)')


def split_extension(filename: str) -> Tuple[str, str]:
    """Split `filename` into (stem, extension), the extension keeping its leading dot."""
    return os.path.splitext(filename)


def title_from_stem(stem: str) -> str:
    """Return the text before the first '(' with surrounding whitespace removed."""
    return stem.split('(', 1)[0].strip()


def tags_from_stem(stem: str) -> List[str]:
    """Return every non-nested parenthesized tag in `stem`, left to right."""
    return TAG_PATTERN.findall(stem)


def join_filename(title: str, tags: Iterable[str], extension: str) -> str:
    """Build the canonical filename: `Title (Tag1) (Tag2).ext`.

    This is the only join rule used when cleaning, so parsing its output gives
    back the same title and tags.
    """
    name = title
    for tag in tags:
        name += f' ({tag})'
    return name + extension
