"""Pytest configuration for rom-sift tests."""
import io
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from rich.console import Console

# Add the repository root to path so tests can import rom_sift, siftlib and utils
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))


class FakeFS:
    """In-memory stand-in for DirectoryFS that records every call."""

    def __init__(self, names, sizes=None, mtimes=None, fail=()):
        self.files = list(names)
        self.sizes = dict(sizes or {})
        self.mtimes = dict(mtimes or {})
        self.fail = set(fail)
        self.calls = []

    def list_files(self):
        return list(self.files)

    def rename(self, old_name, new_name):
        self.calls.append(('rename', old_name, new_name))
        if old_name in self.fail:
            raise PermissionError(f"permission denied: {old_name}")
        if old_name == new_name:
            return
        if new_name in self.files:
            raise FileExistsError(f"'{new_name}' already exists")
        if old_name not in self.files:
            raise FileNotFoundError(old_name)
        self.files[self.files.index(old_name)] = new_name

    def delete(self, name):
        self.calls.append(('delete', name))
        if name in self.fail:
            raise PermissionError(f"permission denied: {name}")
        if name not in self.files:
            raise FileNotFoundError(name)
        self.files.remove(name)

    def stat(self, name):
        if name not in self.files:
            raise FileNotFoundError(name)
        return SimpleNamespace(st_size=self.sizes.get(name, 0), st_mtime=self.mtimes.get(name, 0))


@pytest.fixture
def make_fs():
    return FakeFS


@pytest.fixture
def console_buffer():
    buf = io.StringIO()
    console = Console(file=buf, force_terminal=False, color_system=None, highlight=False,
                      emoji=False, soft_wrap=True)
    return console, buf
