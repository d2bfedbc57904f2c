"""Find the files to index under a directory."""
import os
from pathlib import Path
from typing import List, Tuple

IGNORED_DIRS = {
    '.git',
    '.hg',
    '.svn',
    '.idea',
    '.vscode',
    '.venv',
    'venv',
    'env',
    'node_modules',
    '__pycache__',
    '.pytest_cache',
    '.mypy_cache',
    '.tox',
    'dist',
    'build',
    'out',
    'target',
    'vendor',
}


def list_files(root: Path, limit: int = 200) -> Tuple[List[Path], bool]:
    """Walk root in sorted order and return up to limit file paths.

    The second value is True when the walk stopped because the limit was
    reached.
    """
    files = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in IGNORED_DIRS and not d.startswith('.')
        )
        for name in sorted(filenames):
            if len(files) == limit:
                return files, True
            files.append(Path(dirpath) / name)
    return files, False
