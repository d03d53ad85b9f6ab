"""Persistence for repository records, generated documents and generation status."""

from .documents import FileDocumentationStore, InMemoryDocumentationStore, documentation_filename
from .registry import (
    InMemoryRepositoryRegistry,
    JsonRepositoryRegistry,
    RepositoryNotFound,
    RepositoryRecord,
    RepositoryRegistry,
)
from .status import GenerationStatus, GenerationStatusStore

__all__ = [
    "FileDocumentationStore",
    "GenerationStatus",
    "GenerationStatusStore",
    "InMemoryDocumentationStore",
    "InMemoryRepositoryRegistry",
    "JsonRepositoryRegistry",
    "RepositoryNotFound",
    "RepositoryRecord",
    "RepositoryRegistry",
    "documentation_filename",
]
