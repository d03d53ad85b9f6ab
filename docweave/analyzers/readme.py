"""Root README reader."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from .base import Extractor
from .utils import read_text
from ..models import FileDescriptor, ReadmeInfo

README_CHAR_BUDGET = 5000


class ReadmeExtractor(Extractor):
    """Reads the first root-level file whose name starts with "readme"."""

    name = "readme"

    def __init__(self, char_budget: int = README_CHAR_BUDGET) -> None:
        self.char_budget = char_budget

    def empty(self) -> Optional[ReadmeInfo]:
        return None

    def extract(self, files: Sequence[FileDescriptor], root: Path) -> Optional[ReadmeInfo]:
        for file in files:
            if file.is_directory or "/" in file.relative_path:
                continue
            if not file.name.lower().startswith("readme"):
                continue
            text = read_text(root, file.relative_path)
            if text is None:
                continue
            # Plain prefix slice; no attempt to respect word boundaries.
            return ReadmeInfo(
                filename=file.name,
                content=text[: self.char_budget],
                full_length=len(text),
                truncated=len(text) > self.char_budget,
            )
        return None
