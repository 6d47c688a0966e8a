"""Planning helpers for rom-sift: parsing, grouping, clean/sift planning and execution."""
from .entries import FileEntry, parse_filename, group_by_title, tag_histogram, common_tags
from .plan import Operation, ExecutionSummary, execute_plan

__all__ = [
    "FileEntry", "parse_filename", "group_by_title", "tag_histogram", "common_tags",
    "Operation", "ExecutionSummary", "execute_plan",
]
