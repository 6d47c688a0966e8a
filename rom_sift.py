#!/usr/bin/env python3
"""
ROM Sift

Tidies a directory of region/version-tagged ROM filenames.

Commands:
- `clean`: strips parenthesized tags that every file of a title shares, so each
  file keeps only the tags that tell it apart from its siblings. A title with a
  single file loses all of its tags (`Widget (Rev A).zip` -> `Widget.zip`).
- `sift`: for every title with more than one file, chooses which files to keep
  (by a keep policy, or interactively) and deletes the rest.

Both commands scan the directory once, plan every rename/delete up front, and
then either print the plan (`--noop`) or apply it in order.

Configuration note:
- An optional `romsift_config.json` (in the current directory, the `--src`
  root, or given with `--config`) sets the default keep policy, the region
  priority used by the `region` policy, extra filenames to ignore, and log
  rotation. Command-line flags take precedence over the config file.

Typical usage:
        # Preview which tags would be removed
        python rom_sift.py clean --noop "G:/Games/SNES"

        # Pick the files to keep for every duplicated title
        python rom_sift.py sift --interactive "G:/Games/SNES"

        # Keep the best region of every title without prompting
        python rom_sift.py sift --keep region "G:/Games/SNES"
"""
import argparse
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from siftlib.clean import plan_clean, parse_confirmation
from siftlib.entries import FileEntry, group_by_title, parse_filename
from siftlib.fsops import DirectoryFS
from siftlib.plan import ExecutionSummary, Operation, execute_plan
from siftlib.sift import KEEP_POLICIES, get_keep_policy, plan_sift, prompt_keep_selection
from utils.constants import (
    CONFIG_FILENAME, DEFAULT_KEEP_POLICY, IGNORED_FILENAMES, LOG_BACKUP_COUNT, LOG_FILENAME, LOG_MAX_BYTES,
)

__version__ = '1.0.0'


def load_config(config_path=None, project_root=None) -> Dict:
    """Load the optional JSON config; a missing or unreadable file yields `{}`."""
    if config_path:
        cfg_path = Path(config_path)
    else:
        cfg_path = Path(project_root or Path.cwd()) / CONFIG_FILENAME

    if not cfg_path.exists():
        return {}
    try:
        with open(cfg_path, 'r', encoding='utf-8') as f:
            cfg = json.load(f)
    except (OSError, ValueError) as e:
        print(f'Warning: could not read config {cfg_path}: {e}')
        return {}
    if not isinstance(cfg, dict):
        print(f'Warning: ignoring config {cfg_path}: expected a JSON object')
        return {}
    return cfg


class RomSifter:
    """Runs the clean and sift workflows against one ROM directory."""

    def __init__(self, rom_dir: str, interactive: bool = False, noop: bool = False, verbose: bool = False,
                 keep_policy: Optional[str] = None, project_root: Optional[str] = None,
                 config_path: Optional[str] = None, fs=None, prompt: Callable[[str], str] = input,
                 console: Optional[Console] = None):
        """
        Args:
            rom_dir: Directory holding the ROM files
            interactive: Prompt for which files to keep / which renames to apply
            noop: Only preview changes; never touch the filesystem
            verbose: Narrate every file found and skipped
            keep_policy: Name of the non-interactive sift policy (overrides config)
            project_root: Where `romsift_config.json` and the log file live (default: cwd)
            config_path: Explicit config file path (overrides project_root lookup)
            fs: Filesystem capability; defaults to a `DirectoryFS` over `rom_dir`
            prompt: Line-input function used for interactive questions
        """
        self.rom_dir = Path(rom_dir)
        self.interactive = bool(interactive)
        self.noop = bool(noop)
        self.verbose = bool(verbose)
        self.prompt = prompt
        self.console = console or Console(highlight=False, emoji=False, soft_wrap=True)
        self.project_root = Path(project_root).resolve() if project_root else Path.cwd()
        self.config = load_config(config_path, self.project_root)

        log_cfg = self.config.get('logging', {}) or {}
        log_name = log_cfg.get('log_file', LOG_FILENAME)

        ignore = set(IGNORED_FILENAMES) | {Path(log_name).name} | set(self.config.get('ignore', []) or [])
        self.fs = fs if fs is not None else DirectoryFS(self.rom_dir, ignore=ignore)

        # Keep policy priority: explicit argument > config file > default ('first')
        region_priority = (self.config.get('sift', {}) or {}).get('region_priority')
        if keep_policy:
            self.keep_policy_name = keep_policy
        else:
            self.keep_policy_name = (self.config.get('defaults', {}) or {}).get('keep_policy') or DEFAULT_KEEP_POLICY
            if self.keep_policy_name not in KEEP_POLICIES:
                print(f"Warning: unknown keep policy {self.keep_policy_name!r} in config; using '{DEFAULT_KEEP_POLICY}'")
                self.keep_policy_name = DEFAULT_KEEP_POLICY
        self.keep_policy = get_keep_policy(self.keep_policy_name, region_priority)

        # Per-directory logger capturing every planned and applied change
        try:
            log_path = self.project_root / log_name
            # Sifters on the same directory and log file share one logger and handler
            self.logger = logging.getLogger(f'RomSifter:{self.rom_dir}:{log_path}')
            # Avoid adding duplicate handlers when reusing the same logger
            if not self.logger.handlers:
                handler = RotatingFileHandler(
                    str(log_path),
                    maxBytes=int(log_cfg.get('max_bytes', LOG_MAX_BYTES)),
                    backupCount=int(log_cfg.get('backup_count', LOG_BACKUP_COUNT)),
                    encoding='utf-8',
                )
                handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(message)s'))
                self.logger.addHandler(handler)
            self.logger.setLevel(logging.DEBUG if self.verbose else logging.INFO)
        except Exception:
            # Logging should never block sifting or cleaning
            self.logger = None

    def __del__(self):
        try:
            self.close()
        except Exception:
            pass

    def close(self):
        """Close and detach log handlers so the log file is not held open.

        The handler is shared with any other sifter on the same directory and
        log file, so closing one stops file logging for all of them.
        """
        if getattr(self, 'logger', None):
            for h in list(self.logger.handlers):
                h.close()
                self.logger.removeHandler(h)

    def _say(self, text: str = ''):
        self.console.print(text)

    def _report_error(self, filename: str, error: Exception):
        self._say(f"  [red]✗ ERROR:[/red] {escape(filename)}: {escape(str(error))}")

    def _report_operation(self, index: int, total: int, op: Operation, dry_run: bool):
        prefix = f"\\[{index}/{total}]"
        if op.kind == 'rename':
            verb = 'Would rename' if dry_run else 'Rename'
            old_name = op.entries[0].filename
            self._say(f"{prefix} {verb} [bold]{escape(old_name)}[/bold] to [bold]{escape(op.target)}[/bold]...")
        else:
            verb = 'Would delete' if dry_run else 'Delete'
            for entry in op.entries:
                self._say(f"{prefix} {verb} [bold]{escape(entry.filename)}[/bold]...")

    def _ask(self, text: str) -> str:
        """Read one answer; a closed stdin counts as a blank answer."""
        try:
            return self.prompt(text)
        except EOFError:
            if self.logger:
                self.logger.info(f"No input available for prompt {text.strip()!r}; using the default")
            return ''

    def _pause_for_enter(self):
        if self.interactive:
            self._say()
            self._ask('Press enter to continue...')

    def scan(self) -> Dict[str, List[FileEntry]]:
        """List the directory once and group its files by title."""
        self._say(f"Scanning {escape(str(self.rom_dir))}...")
        if self.verbose:
            self._say()

        filenames = self.fs.list_files()
        entries = []
        for filename in filenames:
            entry = parse_filename(filename)
            entries.append(entry)
            if self.verbose:
                self._say(f"Found [bold]{escape(entry.filename)}[/bold].")
            if self.logger:
                self.logger.info(f"Found {entry.filename} (title={entry.title!r}, tags={list(entry.tags)})")

        groups = group_by_title(entries)
        if groups:
            self._say()
            self._say(f"Found [bold]{len(groups)}[/bold] titles across [bold]{len(filenames)}[/bold] files.")
        if self.logger:
            self.logger.info(f"Scanned {self.rom_dir}: {len(groups)} titles across {len(filenames)} files")
        return groups

    def _confirm_renames(self, title: str, operations: List[Operation]) -> bool:
        self._say()
        self._say(f"[bold]{escape(title)}[/bold]:")
        for op in operations:
            self._say(f"  {escape(op.description)}")
        response = self._ask(f"Apply {len(operations)} rename(s) for {title}? [Y/n] ")
        return parse_confirmation(response, default=True)

    def clean(self) -> Optional[ExecutionSummary]:
        """Strip redundant tags from every filename in the directory."""
        groups = self.scan()
        if not groups:
            self._say('No files to clean.')
            return None

        self._say()
        self._say('Clean files...')

        total_count = 0
        operations: List[Operation] = []
        for title, entries in groups.items():
            total_count += len(entries)
            decisions = plan_clean(entries, self.fs.rename, logger=self.logger, on_error=self._report_error)

            if self.verbose:
                for decision in decisions:
                    if not decision.operation:
                        verb = 'Would skip' if self.noop else 'Skip'
                        self._say(f"{verb} [bold]{escape(decision.entry.filename)}[/bold]...")

            group_ops = [d.operation for d in decisions if d.operation]
            if group_ops and self.interactive and not self._confirm_renames(title, group_ops):
                if self.logger:
                    self.logger.info(f"User declined {len(group_ops)} rename(s) for {title!r}")
                continue
            operations.extend(group_ops)

        if not operations:
            self._say('No files to clean.')
            return ExecutionSummary(total_planned=0, total_applied=0, dry_run=self.noop)

        self._say()
        summary = execute_plan(operations, dry_run=self.noop, report=self._report_operation, logger=self.logger)

        self._say()
        if self.noop:
            self._say(f"Would have cleaned [bold]{summary.total_planned}[/bold] of [bold]{total_count}[/bold] files.")
        else:
            self._say(f"Cleaned [bold]{summary.total_applied}[/bold] of [bold]{total_count}[/bold] files.")
            if summary.failed:
                self._say(f"[yellow]⚠️  {summary.failed} file(s) could not be renamed (see errors above).[/yellow]")
        return summary

    def _select_default(self, entries: List[FileEntry]):
        return self.keep_policy(entries, self.fs.stat)

    def _select_interactive(self, entries: List[FileEntry]):
        self._say()
        return prompt_keep_selection(entries[0].title, entries, prompt=self._ask,
                                     show=lambda line: self._say(escape(line)))

    def sift(self) -> Optional[ExecutionSummary]:
        """Remove title-duplicates, keeping the files chosen per title."""
        groups = self.scan()
        if not groups:
            self._say('No files to sift.')
            return None

        self._pause_for_enter()
        self._say()
        self._say('Sift files...')
        if self.logger and not self.interactive:
            self.logger.info(f"Using keep policy '{self.keep_policy_name}'")

        select = self._select_interactive if self.interactive else self._select_default
        total_count = 0
        operations: List[Operation] = []
        for title, entries in groups.items():
            total_count += len(entries)
            # A lone file has no duplicates to sift
            if len(entries) < 2:
                continue

            plan = plan_sift(entries, select, self.fs.delete, logger=self.logger, on_error=self._report_error)
            if self.verbose:
                for entry in plan.kept:
                    self._say(f"Keep [bold]{escape(entry.filename)}[/bold].")
            if plan.operation:
                operations.append(plan.operation)

        if not operations:
            self._say('No files to sift.')
            return ExecutionSummary(total_planned=0, total_applied=0, dry_run=self.noop)

        self._say()
        summary = execute_plan(operations, dry_run=self.noop, report=self._report_operation, logger=self.logger)

        self._say()
        if self.noop:
            self._say(f"Would have removed [bold]{summary.total_planned}[/bold] of [bold]{total_count}[/bold] files.")
        else:
            self._say(f"Removed [bold]{summary.total_applied}[/bold] of [bold]{total_count}[/bold] files.")
            if summary.failed:
                self._say(f"[yellow]⚠️  {summary.failed} file(s) could not be deleted (see errors above).[/yellow]")
        return summary


def check_dir(directory: str) -> int:
    """Return 0 when `directory` can be scanned, else print an error and return 1."""
    if not os.path.isdir(directory):
        print(f'error: directory {directory} not found', file=sys.stderr)
        return 1
    if not os.access(directory, os.R_OK | os.X_OK):
        print(f'error: directory {directory} cannot be accessed', file=sys.stderr)
        return 1
    return 0


def _add_common_options(parser: argparse.ArgumentParser, action: str):
    parser.add_argument('rom_directory', metavar='rom-directory', help='Directory containing the ROM files')
    parser.add_argument('--interactive', action='store_true', help=f'Prompt before each {action}')
    parser.add_argument('-n', '--noop', action='store_true', help=f"Only preview file changes, don't actually {action}")
    parser.add_argument('-v', '--verbose', action='store_true', help='List every file found and skipped')
    parser.add_argument('--config', '-c', help=f'Path to {CONFIG_FILENAME} (default: --src location or cwd)')
    parser.add_argument('--src', help='Folder holding the config and log file (default: cwd)')


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='rom-sift',
        description='Sift through ROM files to remove duplicates and clean up their names',
        usage='%(prog)s command [options] <rom-directory>',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    subparsers = parser.add_subparsers(dest='command', metavar='command')
    subparsers.required = True

    sift_parser = subparsers.add_parser('sift', help='sift through files to remove duplicates')
    _add_common_options(sift_parser, 'sift')
    sift_parser.add_argument('--keep', choices=list(KEEP_POLICIES),
                             help=f'Which file to keep per title when not interactive (default: config or {DEFAULT_KEEP_POLICY})')

    clean_parser = subparsers.add_parser('clean', help='remove unnecessary tags from file names')
    _add_common_options(clean_parser, 'clean')

    args = parser.parse_args(argv)

    code = check_dir(args.rom_directory)
    if code:
        return code

    sifter = RomSifter(
        args.rom_directory,
        interactive=args.interactive,
        noop=args.noop,
        verbose=args.verbose,
        keep_policy=getattr(args, 'keep', None),
        project_root=args.src,
        config_path=args.config,
    )
    try:
        if args.command == 'sift':
            sifter.sift()
        else:
            sifter.clean()
    except KeyboardInterrupt:
        print("\n\n⏸️  Interrupted by user. Operations already applied were kept.")
        return 130
    finally:
        sifter.close()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
