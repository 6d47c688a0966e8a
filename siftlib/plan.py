"""Deferred filesystem operations and the executor that commits them.

Planning builds an ordered list of `Operation` objects without touching the
disk; `execute_plan` either reports them (dry-run) or runs them in order.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .entries import FileEntry

ActionResult = Union[bool, int]


@dataclass(frozen=True)
class Operation:
    """A planned, not-yet-applied rename or delete."""
    kind: str  # 'rename' | 'delete'
    title: str
    entries: Tuple[FileEntry, ...]
    description: str
    planned: int
    action: Callable[[], ActionResult]
    target: str = ''  # new name, for renames


@dataclass(frozen=True)
class ExecutionSummary:
    total_planned: int
    total_applied: int
    dry_run: bool = False

    @property
    def failed(self) -> int:
        if self.dry_run:
            return 0
        return self.total_planned - self.total_applied


def rename_action(renamer: Callable[[str, str], None], old_name: str, new_name: str, logger=None,
                  on_error: Optional[Callable[[str, Exception], None]] = None) -> Callable[[], bool]:
    """Wrap `renamer(old_name, new_name)` into a deferred action returning success."""
    def _apply() -> bool:
        try:
            renamer(old_name, new_name)
        except OSError as e:
            if logger: logger.warning(f"Could not rename {old_name} to {new_name}: {e}")
            if on_error: on_error(old_name, e)
            return False
        if logger: logger.info(f"Renamed {old_name} to {new_name}")
        return True
    return _apply


def delete_action(remover: Callable[[str], None], filenames: Sequence[str], logger=None,
                  on_error: Optional[Callable[[str, Exception], None]] = None) -> Callable[[], int]:
    """Wrap `remover` over `filenames` into a deferred action returning the delete count.

    A failed delete is logged and skipped; the remaining files are still removed.
    """
    names = list(filenames)

    def _apply() -> int:
        deleted = 0
        for name in names:
            try:
                remover(name)
            except OSError as e:
                if logger: logger.warning(f"Could not delete {name}: {e}")
                if on_error: on_error(name, e)
                continue
            if logger: logger.info(f"Deleted {name}")
            deleted += 1
        return deleted
    return _apply


def execute_plan(operations: List[Operation], dry_run: bool = False,
                 report: Optional[Callable[[int, int, Operation, bool], None]] = None,
                 logger=None) -> ExecutionSummary:
    """Report or run `operations` in plan order and tally the results.

    `report(index, total, operation, dry_run)` is called before each operation
    (1-based index). In dry-run mode no action is invoked.
    """
    total = len(operations)
    total_planned = sum(op.planned for op in operations)
    total_applied = 0

    for index, op in enumerate(operations, start=1):
        if report:
            report(index, total, op, dry_run)
        if dry_run:
            continue
        try:
            result = op.action()
        except OSError as e:
            # Actions catch their own errors; this only guards hand-built ones
            if logger: logger.exception(f"Operation failed ({op.kind} {op.description}): {e}")
            result = 0
        total_applied += int(result)

    if logger:
        if dry_run:
            logger.info(f"Dry-run: {total} operations covering {total_planned} files")
        else:
            logger.info(f"Applied {total} operations ({total_applied} of {total_planned} files changed)")
    return ExecutionSummary(total_planned=total_planned, total_applied=total_applied, dry_run=dry_run)
