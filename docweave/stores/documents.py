"""Storage for generated markdown documents."""

from __future__ import annotations

import re
import threading
from pathlib import Path
from typing import Dict, Optional

from ..logging import get_logger


def documentation_filename(repo_name: str, repo_id: str) -> str:
    """Return ``<slug>-<id>.md`` where every non-alphanumeric character becomes ``-``."""
    slug = re.sub(r"[^a-z0-9]", "-", repo_name, flags=re.IGNORECASE).lower()
    return f"{slug}-{repo_id}.md"


class FileDocumentationStore:
    """Markdown files under a single directory, addressed by filename."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self.logger = get_logger("stores.documents")

    def save(self, repo_id: str, repo_name: str, markdown: str) -> str:
        """Write the document and return its filename."""
        filename = documentation_filename(repo_name, str(repo_id))
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / filename).write_text(markdown, encoding="utf-8")
        self.logger.info("Documentation saved: %s", filename)
        return filename

    def read(self, filename: str) -> str:
        """Return document contents. Raises FileNotFoundError for unknown names."""
        return self._path(filename).read_text(encoding="utf-8")

    def delete(self, filename: str | None) -> None:
        """Remove a document; missing files are ignored."""
        if not filename:
            return
        try:
            self._path(filename).unlink()
        except FileNotFoundError:
            return
        self.logger.info("Documentation deleted: %s", filename)

    def _path(self, filename: str) -> Path:
        # Filenames come from HTTP callers; keep them inside the directory.
        if Path(filename).name != filename:
            raise FileNotFoundError(filename)
        return self.directory / filename


class InMemoryDocumentationStore:
    """Markdown keyed by repository id or generation id."""

    def __init__(self) -> None:
        self._documents: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._documents.get(str(key))

    def set(self, key: str, markdown: str) -> None:
        with self._lock:
            self._documents[str(key)] = markdown

    def delete(self, key: str) -> None:
        with self._lock:
            self._documents.pop(str(key), None)


__all__ = ["FileDocumentationStore", "InMemoryDocumentationStore", "documentation_filename"]
