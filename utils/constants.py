"""Shared constants for rom-sift."""

CONFIG_FILENAME = 'romsift_config.json'
LOG_FILENAME = 'romsift.log'

# Log rotation defaults (overridable from the `logging` section of the config)
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

# Files that are never treated as ROMs when scanning a directory
IGNORED_FILENAMES = {
    CONFIG_FILENAME, LOG_FILENAME, 'Thumbs.db', '.DS_Store', 'desktop.ini'
}

DEFAULT_KEEP_POLICY = 'first'

# Region preference used by the `region` keep policy (earlier is better)
DEFAULT_REGION_PRIORITY = [
    'USA', 'World', 'Europe', 'Australia', 'Canada', 'UK',
    'Japan', 'Korea', 'Asia', 'France', 'Germany', 'Spain', 'Italy',
]
