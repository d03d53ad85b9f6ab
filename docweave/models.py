"""Core data models shared across docweave components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class FileDescriptor:
    """One entry emitted by the file walker."""

    name: str
    relative_path: str
    is_directory: bool
    size: int = 0
    extension: str = ""


@dataclass(frozen=True)
class RepositoryInfo:
    """Identity of the analyzed repository."""

    name: str
    analyzed_at: str
    total_files: int


@dataclass(frozen=True)
class LanguageCount:
    language: str
    file_count: int


@dataclass(frozen=True)
class DependencyInfo:
    """Declared dependencies of the root manifest."""

    production: Tuple[str, ...] = ()
    development: Tuple[str, ...] = ()
    total: int = 0
    package_manager: str = "unknown"


@dataclass(frozen=True)
class ReadmeInfo:
    """Root README contents, prefix-truncated to a fixed character budget."""

    filename: str
    content: str
    full_length: int
    truncated: bool


@dataclass(frozen=True)
class ApiSpec:
    file: str
    type: str
    size: int
    preview: str


@dataclass(frozen=True)
class CodeMetrics:
    """Size figures. ``estimated_lines_of_code`` is extrapolated from a sample."""

    total_files: int = 0
    code_files: int = 0
    estimated_lines_of_code: int = 0
    total_size_bytes: int = 0
    average_file_size: int = 0


@dataclass(frozen=True)
class AnalysisResult:
    """Assembled output of one analysis run. Every facet has a defined empty value."""

    repository: RepositoryInfo
    structure: str
    languages: Tuple[LanguageCount, ...] = ()
    frameworks: Tuple[str, ...] = ()
    dependencies: DependencyInfo = field(default_factory=DependencyInfo)
    readme: Optional[ReadmeInfo] = None
    entry_points: Tuple[str, ...] = ()
    config_files: Tuple[str, ...] = ()
    test_files: Tuple[str, ...] = ()
    documentation_files: Tuple[str, ...] = ()
    api_specs: Tuple[ApiSpec, ...] = ()
    metrics: CodeMetrics = field(default_factory=CodeMetrics)
    # Facets produced by plugin extractors, keyed by extractor name.
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping using the published camelCase field names."""
        readme: Optional[Dict[str, Any]] = None
        if self.readme is not None:
            readme = {
                "filename": self.readme.filename,
                "content": self.readme.content,
                "fullLength": self.readme.full_length,
                "truncated": self.readme.truncated,
            }
        return {
            "repository": {
                "name": self.repository.name,
                "analyzedAt": self.repository.analyzed_at,
                "totalFiles": self.repository.total_files,
            },
            "structure": self.structure,
            "languages": [
                {"language": item.language, "fileCount": item.file_count}
                for item in self.languages
            ],
            "frameworks": list(self.frameworks),
            "dependencies": {
                "production": list(self.dependencies.production),
                "development": list(self.dependencies.development),
                "total": self.dependencies.total,
                "packageManager": self.dependencies.package_manager,
            },
            "readme": readme,
            "entryPoints": list(self.entry_points),
            "configFiles": list(self.config_files),
            "testFiles": list(self.test_files),
            "documentationFiles": list(self.documentation_files),
            "apiSpecs": [
                {"file": spec.file, "type": spec.type, "size": spec.size, "preview": spec.preview}
                for spec in self.api_specs
            ],
            "metrics": {
                "totalFiles": self.metrics.total_files,
                "codeFiles": self.metrics.code_files,
                "estimatedLinesOfCode": self.metrics.estimated_lines_of_code,
                "totalSizeBytes": self.metrics.total_size_bytes,
                "averageFileSize": self.metrics.average_file_size,
            },
            "extras": dict(self.extras),
        }
