"""Directory walking that produces the flat file list analyzers consume."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Set

from .logging import get_logger
from .models import FileDescriptor

DEFAULT_MAX_DEPTH = 6

_EXCLUDED_DIRS = {
    "node_modules",
    "__pycache__",
    "dist",
    "build",
    "target",
    "vendor",
    "venv",
    "coverage",
    "out",
    "bin",
    "obj",
}

# Dot-prefixed entries that carry project configuration and are kept.
_ALLOWED_DOTFILES = {
    ".env",
    ".env.example",
    ".env.sample",
    ".gitignore",
    ".dockerignore",
    ".editorconfig",
    ".nvmrc",
    ".babelrc",
    ".prettierrc",
    ".eslintrc",
    ".eslintrc.js",
    ".eslintrc.json",
    ".gitlab-ci.yml",
    ".github",
}


class FileWalker:
    """Walks a directory tree into a list of FileDescriptor entries.

    Entries are emitted pre-order in sorted-name order, so a directory's
    descriptor always precedes the descriptors beneath it. Descent stops
    at ``max_depth``; symlinked directories are followed, and the depth
    bound is what guarantees termination on cycles.
    """

    def __init__(self, extra_excluded_dirs: Iterable[str] = ()) -> None:
        self.excluded_dirs: Set[str] = set(_EXCLUDED_DIRS) | set(extra_excluded_dirs)
        self.logger = get_logger("walker")

    def walk(self, root: str | Path, max_depth: int = DEFAULT_MAX_DEPTH) -> List[FileDescriptor]:
        root_path = Path(root)
        if not root_path.is_dir():
            self.logger.warning("Walk root %s is not an accessible directory", root_path)
            return []
        descriptors: List[FileDescriptor] = []
        self._walk_dir(root_path, "", 1, max_depth, descriptors)
        return descriptors

    def _walk_dir(
        self,
        directory: Path,
        rel_dir: str,
        depth: int,
        max_depth: int,
        descriptors: List[FileDescriptor],
    ) -> None:
        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as exc:
            self.logger.warning("Skipping unreadable directory %s: %s", rel_dir or ".", exc)
            return

        for entry in entries:
            name = entry.name
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            try:
                is_dir = entry.is_dir()
                if is_dir:
                    if self._skip_directory(name):
                        continue
                    descriptors.append(
                        FileDescriptor(name=name, relative_path=rel_path, is_directory=True)
                    )
                    if depth < max_depth:
                        self._walk_dir(Path(entry.path), rel_path, depth + 1, max_depth, descriptors)
                    continue

                if self._skip_hidden(name):
                    continue
                size = entry.stat().st_size
            except OSError as exc:
                self.logger.warning("Skipping unreadable entry %s: %s", rel_path, exc)
                continue

            descriptors.append(
                FileDescriptor(
                    name=name,
                    relative_path=rel_path,
                    is_directory=False,
                    size=size,
                    extension=_extension(name),
                )
            )

    def _skip_directory(self, name: str) -> bool:
        return name in self.excluded_dirs or self._skip_hidden(name)

    @staticmethod
    def _skip_hidden(name: str) -> bool:
        return name.startswith(".") and name not in _ALLOWED_DOTFILES


def _extension(name: str) -> str:
    return Path(name).suffix.lower()


__all__ = ["DEFAULT_MAX_DEPTH", "FileWalker"]
