"""Language detection by file extension."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Sequence, Tuple

from .base import Extractor
from ..models import FileDescriptor, LanguageCount

LANGUAGE_BY_EXTENSION: Dict[str, str] = {
    ".py": "Python",
    ".pyi": "Python",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".java": "Java",
    ".kt": "Kotlin",
    ".kts": "Kotlin",
    ".go": "Go",
    ".rs": "Rust",
    ".rb": "Ruby",
    ".php": "PHP",
    ".cs": "C#",
    ".c": "C",
    ".h": "C",
    ".cpp": "C++",
    ".hpp": "C++",
    ".cc": "C++",
    ".hh": "C++",
    ".swift": "Swift",
    ".m": "Objective-C",
    ".scala": "Scala",
    ".r": "R",
    ".jl": "Julia",
    ".dart": "Dart",
    ".vue": "Vue",
    ".svelte": "Svelte",
    ".sh": "Shell",
    ".bash": "Shell",
    ".ps1": "PowerShell",
    ".sql": "SQL",
    ".html": "HTML",
    ".css": "CSS",
    ".scss": "SCSS",
}


class LanguageExtractor(Extractor):
    """Counts files per language, most common first."""

    name = "languages"

    def empty(self) -> Tuple[LanguageCount, ...]:
        return ()

    def extract(self, files: Sequence[FileDescriptor], root: Path) -> Tuple[LanguageCount, ...]:
        counts: Dict[str, int] = {}
        for file in files:
            if file.is_directory:
                continue
            language = LANGUAGE_BY_EXTENSION.get(file.extension)
            if language is None:
                continue
            counts[language] = counts.get(language, 0) + 1

        # sorted() is stable, so equal counts keep first-encountered order.
        ordered = sorted(counts.items(), key=lambda item: -item[1])
        return tuple(LanguageCount(language=language, file_count=count) for language, count in ordered)
