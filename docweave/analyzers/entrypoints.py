"""Entry point detection by conventional file names."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from .base import Extractor
from ..models import FileDescriptor

MAX_ENTRY_POINTS = 10

# Lower tier sorts first.
ENTRY_POINT_TIERS: Dict[str, int] = {
    # Tier 1: canonical program entry files.
    "main.py": 1,
    "__main__.py": 1,
    "index.js": 1,
    "index.ts": 1,
    "main.go": 1,
    "main.rs": 1,
    "Main.java": 1,
    "Application.java": 1,
    "Program.cs": 1,
    # Tier 2: application/server bootstraps.
    "app.py": 2,
    "manage.py": 2,
    "wsgi.py": 2,
    "asgi.py": 2,
    "app.js": 2,
    "app.ts": 2,
    "main.js": 2,
    "main.ts": 2,
    "server.js": 2,
    "server.ts": 2,
    "lib.rs": 2,
    "main.c": 2,
    "main.cpp": 2,
    "main.rb": 2,
    "index.php": 2,
    # Tier 3: UI roots and helper launchers.
    "index.jsx": 3,
    "index.tsx": 3,
    "App.jsx": 3,
    "App.tsx": 3,
    "cli.py": 3,
    "run.py": 3,
    "start.js": 3,
    "config.ru": 3,
}


class EntryPointExtractor(Extractor):
    """Finds conventional entry files, ordered by tier then walk order."""

    name = "entry_points"

    def empty(self) -> Tuple[str, ...]:
        return ()

    def extract(self, files: Sequence[FileDescriptor], root: Path) -> Tuple[str, ...]:
        matches: List[Tuple[int, str]] = []
        for file in files:
            if file.is_directory:
                continue
            tier = ENTRY_POINT_TIERS.get(file.name)
            if tier is not None:
                matches.append((tier, file.relative_path))

        ordered = sorted(matches, key=lambda match: match[0])
        return tuple(path for _, path in ordered[:MAX_ENTRY_POINTS])
