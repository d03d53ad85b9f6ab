"""API specification discovery (OpenAPI/Swagger and GraphQL)."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .base import Extractor
from .utils import read_text
from ..models import ApiSpec, FileDescriptor

MAX_API_SPECS = 10
PREVIEW_CHARS = 500
MAX_SPEC_BYTES = 1024 * 1024

OPENAPI = "OpenAPI/Swagger"
GRAPHQL = "GraphQL"

_REST_EXTENSIONS = {".yaml", ".yml", ".json"}
_REST_NAME_HINTS = ("swagger", "openapi", "api")
_GRAPHQL_EXTENSIONS = {".graphql", ".gql", ".graphqls"}


class ApiSpecExtractor(Extractor):
    """Finds spec candidates by name and keeps those whose content carries a marker.

    Name matching is deliberately loose (any YAML file with "api" in its
    name is a candidate); the content marker check filters most false hits.
    """

    name = "api_specs"

    def empty(self) -> Tuple[ApiSpec, ...]:
        return ()

    def extract(self, files: Sequence[FileDescriptor], root: Path) -> Tuple[ApiSpec, ...]:
        specs: List[ApiSpec] = []
        for file in files:
            if file.is_directory or file.size > MAX_SPEC_BYTES:
                continue
            spec_type = candidate_type(file)
            if spec_type is None:
                continue
            content = read_text(root, file.relative_path)
            if content is None or not has_marker(spec_type, content):
                continue
            specs.append(
                ApiSpec(
                    file=file.relative_path,
                    type=spec_type,
                    size=file.size,
                    preview=content[:PREVIEW_CHARS],
                )
            )
            if len(specs) >= MAX_API_SPECS:
                break
        return tuple(specs)


def candidate_type(file: FileDescriptor) -> Optional[str]:
    lowered = file.name.lower()
    if file.extension in _GRAPHQL_EXTENSIONS:
        return GRAPHQL
    if file.extension in _REST_EXTENSIONS and any(hint in lowered for hint in _REST_NAME_HINTS):
        return OPENAPI
    if Path(lowered).stem == "schema":
        return GRAPHQL
    return None


def has_marker(spec_type: str, content: str) -> bool:
    if spec_type == OPENAPI:
        return any(
            marker in content
            for marker in ("openapi:", "swagger:", '"openapi"', '"swagger"')
        )
    return "type " in content or "schema " in content
