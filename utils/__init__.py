# Utilities package for rom-sift
from .filenames import split_extension, join_filename, title_from_stem, tags_from_stem
from .constants import CONFIG_FILENAME, LOG_FILENAME, DEFAULT_REGION_PRIORITY, IGNORED_FILENAMES

__all__ = [
    "split_extension", "join_filename", "title_from_stem", "tags_from_stem",
    "CONFIG_FILENAME", "LOG_FILENAME", "DEFAULT_REGION_PRIORITY", "IGNORED_FILENAMES",
]
