"""Size metrics with a sampled lines-of-code estimate."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from .base import Extractor
from .utils import read_text
from ..models import CodeMetrics, FileDescriptor

SAMPLE_SIZE = 10

CODE_EXTENSIONS = {
    ".py",
    ".js",
    ".jsx",
    ".mjs",
    ".ts",
    ".tsx",
    ".java",
    ".kt",
    ".go",
    ".rs",
    ".rb",
    ".php",
    ".cs",
    ".c",
    ".h",
    ".cpp",
    ".hpp",
    ".cc",
    ".swift",
    ".scala",
    ".dart",
    ".vue",
    ".svelte",
    ".sh",
}


class CodeMetricsExtractor(Extractor):
    """Counts files and bytes, and estimates lines of code.

    Only the first ``sample_size`` code files are read. The estimate is
    ``average sampled lines * code file count``; it is an approximation by
    design and unreadable samples are left out of the average.
    """

    name = "metrics"

    def __init__(self, sample_size: int = SAMPLE_SIZE) -> None:
        self.sample_size = sample_size

    def empty(self) -> CodeMetrics:
        return CodeMetrics()

    def extract(self, files: Sequence[FileDescriptor], root: Path) -> CodeMetrics:
        total_files = len(files)
        total_size = sum(file.size for file in files if not file.is_directory)
        code_files = [
            file for file in files if not file.is_directory and file.extension in CODE_EXTENSIONS
        ]

        line_counts: List[int] = []
        for file in code_files[: self.sample_size]:
            text = read_text(root, file.relative_path)
            if text is None:
                continue
            line_counts.append(len(text.splitlines()))

        estimated = 0
        if line_counts:
            average = sum(line_counts) / len(line_counts)
            estimated = round(average * len(code_files))

        return CodeMetrics(
            total_files=total_files,
            code_files=len(code_files),
            estimated_lines_of_code=estimated,
            total_size_bytes=total_size,
            average_file_size=round(total_size / total_files) if total_files else 0,
        )
