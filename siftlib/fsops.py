"""Directory access used by the planners: list, rename, delete and stat files."""
import os
from pathlib import Path
from typing import Iterable, List


class DirectoryFS:
    """Filesystem capability scoped to a single ROM directory.

    All names are basenames relative to `root`. Failures surface as `OSError`
    so the deferred operations can catch and report them.
    """

    def __init__(self, root, ignore: Iterable[str] = ()):
        self.root = Path(root)
        self.ignore = set(ignore)

    def list_files(self) -> List[str]:
        """Sorted names of the regular files directly inside `root`."""
        names = []
        for item in self.root.iterdir():
            if item.is_file() and item.name not in self.ignore:
                names.append(item.name)
        return sorted(names)

    def rename(self, old_name: str, new_name: str) -> None:
        if old_name == new_name:
            return
        src = self.root / old_name
        dst = self.root / new_name
        if dst.exists():
            # A case-only rename on a case-insensitive filesystem reports the
            # target as existing; go through a temporary name in that case.
            if old_name.lower() == new_name.lower() and src.exists() and src.samefile(dst):
                tmp = self.root / (new_name + '.tmp.rename')
                src.rename(tmp)
                tmp.rename(dst)
                return
            raise FileExistsError(f"'{new_name}' already exists")
        src.rename(dst)

    def delete(self, name: str) -> None:
        (self.root / name).unlink()

    def stat(self, name: str) -> os.stat_result:
        return (self.root / name).stat()
