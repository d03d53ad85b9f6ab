"""Base class for fact extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Sequence

from ..models import FileDescriptor


class Extractor(ABC):
    """Contract for extractors that derive one facet from the walked file list.

    Extractors are read-only with respect to ``files`` and the repository
    root and hold no state between calls, so a single instance may run
    concurrently with the others.
    """

    name: str = ""

    @abstractmethod
    def empty(self) -> Any:
        """Return the "nothing found" value for this facet."""

    @abstractmethod
    def extract(self, files: Sequence[FileDescriptor], root: Path) -> Any:
        """Produce the facet value for the repository rooted at ``root``."""
