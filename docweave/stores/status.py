"""In-memory progress reports for documentation generations."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class GenerationStatus:
    id: str
    status: str
    message: str
    progress: Optional[int] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"id": self.id, "status": self.status, "message": self.message}
        if self.progress is not None:
            payload["progress"] = self.progress
        if self.updated_at is not None:
            payload["updatedAt"] = self.updated_at
        return payload


class GenerationStatusStore:
    """Latest status per generation id. Unknown ids report ``not_found``."""

    def __init__(self) -> None:
        self._statuses: Dict[str, GenerationStatus] = {}
        self._lock = threading.Lock()

    def get(self, generation_id: str) -> GenerationStatus:
        with self._lock:
            status = self._statuses.get(str(generation_id))
        if status is None:
            return GenerationStatus(
                id=str(generation_id), status="not_found", message="Generation not found"
            )
        return status

    def set(
        self,
        generation_id: str,
        status: str | None = None,
        message: str | None = None,
        progress: int | None = None,
    ) -> GenerationStatus:
        record = GenerationStatus(
            id=str(generation_id),
            status=status or "generating",
            message=message or "Processing...",
            progress=progress,
            updated_at=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        )
        with self._lock:
            self._statuses[record.id] = record
        return record


__all__ = ["GenerationStatus", "GenerationStatusStore"]
