"""Repository registry backed by a JSON file or process memory."""

from __future__ import annotations

import dataclasses
import json
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

REPOSITORY_STATUSES = ("generating", "up-to-date", "outdated", "failed")

# Attribute name -> serialized key.
_FIELD_KEYS = {
    "id": "id",
    "name": "name",
    "url": "url",
    "branch": "branch",
    "type": "type",
    "status": "status",
    "has_documentation": "hasDocumentation",
    "auto_update": "autoUpdate",
    "auto_merge": "autoMerge",
    "last_updated": "lastUpdated",
    "documentation_file": "documentationFile",
}
_IMMUTABLE_FIELDS = {"id", "last_updated"}


class RepositoryNotFound(LookupError):
    """Raised when a repository id (or url) is not registered."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Repository not found: {key}")
        self.key = key


def _utc_now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _check_status(status: str) -> None:
    if status not in REPOSITORY_STATUSES:
        raise ValueError(
            f"Unknown repository status '{status}'; expected one of {', '.join(REPOSITORY_STATUSES)}"
        )


@dataclass(frozen=True)
class RepositoryRecord:
    """A registered repository and its documentation state."""

    id: str
    name: str
    url: str
    branch: str = "main"
    type: str = "integrated"
    status: str = "generating"
    has_documentation: bool = False
    auto_update: bool = False
    auto_merge: bool = False
    last_updated: str = ""
    documentation_file: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for attr, key in _FIELD_KEYS.items()}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RepositoryRecord":
        values: Dict[str, Any] = {}
        for attr, key in _FIELD_KEYS.items():
            if key in payload:
                values[attr] = payload[key]
            elif attr in payload:
                values[attr] = payload[attr]
        if "id" not in values or "name" not in values or "url" not in values:
            raise ValueError("Repository payload requires id, name and url")
        values["id"] = str(values["id"])
        return cls(**values)


class RepositoryRegistry(ABC):
    """Registry operations over a full snapshot of records.

    Subclasses only read and write the snapshot; every mutation reloads,
    modifies and rewrites it under a single lock.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

    @abstractmethod
    def _read(self) -> List[RepositoryRecord]:
        """Return every stored record."""

    @abstractmethod
    def _write(self, records: List[RepositoryRecord]) -> None:
        """Replace the stored records."""

    def list_all(self) -> List[RepositoryRecord]:
        with self._lock:
            return self._read()

    def get(self, repo_id: str) -> RepositoryRecord:
        with self._lock:
            for record in self._read():
                if record.id == str(repo_id):
                    return record
        raise RepositoryNotFound(str(repo_id))

    def find_by_url(self, url: str) -> Optional[RepositoryRecord]:
        with self._lock:
            for record in self._read():
                if record.url == url:
                    return record
        return None

    def add(
        self,
        name: str,
        url: str,
        *,
        branch: str = "main",
        auto_update: bool = False,
        auto_merge: bool = False,
        type: str = "integrated",
        status: str = "generating",
        has_documentation: bool = False,
    ) -> RepositoryRecord:
        _check_status(status)
        with self._lock:
            records = self._read()
            record = RepositoryRecord(
                id=str(self._next_id(records)),
                name=name,
                url=url,
                branch=branch or "main",
                type=type,
                status=status,
                has_documentation=has_documentation,
                auto_update=auto_update,
                auto_merge=auto_merge,
                last_updated=_utc_now(),
            )
            records.append(record)
            self._write(records)
            return record

    def update(self, repo_id: str, updates: Mapping[str, Any]) -> RepositoryRecord:
        """Apply attribute updates. ``id`` is immutable and ``last_updated`` is refreshed."""
        unknown = set(updates) - set(_FIELD_KEYS)
        if unknown:
            raise ValueError(f"Unknown repository fields: {', '.join(sorted(unknown))}")
        if "status" in updates:
            _check_status(updates["status"])
        changes = {key: value for key, value in updates.items() if key not in _IMMUTABLE_FIELDS}
        with self._lock:
            records = self._read()
            for index, record in enumerate(records):
                if record.id == str(repo_id):
                    updated = dataclasses.replace(record, **changes, last_updated=_utc_now())
                    records[index] = updated
                    self._write(records)
                    return updated
        raise RepositoryNotFound(str(repo_id))

    def update_status(
        self,
        repo_id: str,
        status: str,
        has_documentation: bool | None = None,
    ) -> RepositoryRecord:
        updates: Dict[str, Any] = {"status": status}
        if has_documentation is not None:
            updates["has_documentation"] = has_documentation
        return self.update(repo_id, updates)

    def delete(self, repo_id: str) -> RepositoryRecord:
        with self._lock:
            records = self._read()
            remaining = [record for record in records if record.id != str(repo_id)]
            if len(remaining) == len(records):
                raise RepositoryNotFound(str(repo_id))
            removed = next(record for record in records if record.id == str(repo_id))
            self._write(remaining)
            return removed

    @staticmethod
    def _next_id(records: List[RepositoryRecord]) -> int:
        numeric = [int(record.id) for record in records if record.id.isdigit()]
        return max(numeric, default=0) + 1


class InMemoryRepositoryRegistry(RepositoryRegistry):
    """Registry held in process memory; lost on restart."""

    def __init__(self, records: List[RepositoryRecord] | None = None) -> None:
        super().__init__()
        self._records: List[RepositoryRecord] = list(records or [])

    def _read(self) -> List[RepositoryRecord]:
        return list(self._records)

    def _write(self, records: List[RepositoryRecord]) -> None:
        self._records = list(records)


class JsonRepositoryRegistry(RepositoryRegistry):
    """Registry persisted as ``{"repositories": [...]}`` with full-file rewrites."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)

    def _read(self) -> List[RepositoryRecord]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except json.JSONDecodeError as exc:
            raise ValueError(f"Repository registry {self.path} is not valid JSON") from exc
        entries = data.get("repositories") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            return []
        return [RepositoryRecord.from_dict(entry) for entry in entries if isinstance(entry, dict)]

    def _write(self, records: List[RepositoryRecord]) -> None:
        payload = {"repositories": [record.to_dict() for record in records]}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)


__all__ = [
    "InMemoryRepositoryRegistry",
    "JsonRepositoryRegistry",
    "REPOSITORY_STATUSES",
    "RepositoryNotFound",
    "RepositoryRecord",
    "RepositoryRegistry",
]
