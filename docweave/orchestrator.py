"""Analysis pipeline: fetch, walk, extract concurrently, assemble, clean up."""

from __future__ import annotations

import dataclasses
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .analyzers import Extractor, discover_extractors
from .analyzers.structure import render_structure
from .config import DocweaveConfig
from .errors import ExtractionWarning, RepositoryAnalysisFailed, RepositoryUnavailable
from .git.fetcher import DEFAULT_BRANCH, RepositoryFetcher, repository_name
from .logging import get_logger
from .models import AnalysisResult, CodeMetrics, FileDescriptor, RepositoryInfo
from .walker import DEFAULT_MAX_DEPTH, FileWalker

# Extractor name -> AnalysisResult field.
_FACET_FIELDS = {
    "languages": "languages",
    "frameworks": "frameworks",
    "dependencies": "dependencies",
    "readme": "readme",
    "entry_points": "entry_points",
    "config_files": "config_files",
    "test_files": "test_files",
    "documentation_files": "documentation_files",
    "api_specs": "api_specs",
    "metrics": "metrics",
}


class AnalysisState(str, Enum):
    """Lifecycle of one analysis run."""

    IDLE = "idle"
    FETCHING = "fetching"
    WALKING = "walking"
    EXTRACTING = "extracting"
    ASSEMBLED = "assembled"
    FETCH_ERROR = "fetch_error"
    ANALYSIS_ERROR = "analysis_error"
    CLEANED_UP = "cleaned_up"


class _Run:
    """Per-call state tracker; orchestrators are shared across concurrent calls."""

    def __init__(
        self,
        repo_url: str,
        on_transition: Optional[Callable[[AnalysisState], None]],
        logger,
    ) -> None:
        self.repo_url = repo_url
        self.state = AnalysisState.IDLE
        self.history: List[AnalysisState] = [AnalysisState.IDLE]
        self._on_transition = on_transition
        self._logger = logger
        if on_transition is not None:
            on_transition(AnalysisState.IDLE)

    def enter(self, state: AnalysisState) -> None:
        self._logger.debug("%s: %s -> %s", self.repo_url, self.state.value, state.value)
        self.state = state
        self.history.append(state)
        if self._on_transition is not None:
            self._on_transition(state)


class AnalysisOrchestrator:
    """Coordinates fetcher, walker and extractors into an AnalysisResult."""

    def __init__(
        self,
        fetcher: RepositoryFetcher | None = None,
        walker: FileWalker | None = None,
        extractors: Optional[Iterable[Extractor]] = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_workers: int | None = None,
        clock: Callable[[], datetime] | None = None,
        on_transition: Optional[Callable[[AnalysisState], None]] = None,
    ) -> None:
        self.fetcher = fetcher or RepositoryFetcher()
        self.walker = walker or FileWalker()
        self.extractors: List[Extractor] = (
            list(extractors) if extractors is not None else discover_extractors()
        )
        self.max_depth = max_depth
        self.max_workers = max_workers
        self._clock = clock or (lambda: datetime.now(UTC))
        self._on_transition = on_transition
        self.logger = get_logger("orchestrator")

    @classmethod
    def from_config(cls, config: DocweaveConfig, **kwargs: Any) -> "AnalysisOrchestrator":
        """Build an orchestrator from the analysis section of a loaded config."""
        analysis = config.analysis
        fetcher = RepositoryFetcher(analysis.scratch_root, timeout=analysis.clone_timeout)
        extractors = discover_extractors(analysis.enabled_extractors or None)
        return cls(fetcher=fetcher, extractors=extractors, max_depth=analysis.max_depth, **kwargs)

    def analyze_repository(self, repo_url: str, branch: str = DEFAULT_BRANCH) -> AnalysisResult:
        """Clone and analyze a repository.

        Raises RepositoryAnalysisFailed for every failure; its
        ``repository_unavailable`` flag marks clone failures.
        """
        run = _Run(repo_url, self._on_transition, self.logger)
        if not isinstance(repo_url, str) or not repo_url.strip():
            error = ValueError("Repository URL must be a non-empty string")
            raise RepositoryAnalysisFailed(str(error), cause=error) from error
        branch = branch or DEFAULT_BRANCH
        name = repository_name(repo_url)

        self.logger.info("Analyzing %s (branch %s)", repo_url, branch)
        try:
            run.enter(AnalysisState.FETCHING)
            # checkout() releases the scratch directory on every exit path,
            # after all extractor futures below have completed.
            with self.fetcher.checkout(repo_url, branch) as scratch:
                result = self._analyze_checkout(scratch, name, run)
        except RepositoryUnavailable as exc:
            run.enter(AnalysisState.FETCH_ERROR)
            self.logger.warning("Fetch failed for %s: %s", repo_url, exc)
            raise RepositoryAnalysisFailed(f"Repository unavailable: {exc}", cause=exc) from exc
        except Exception as exc:
            run.enter(AnalysisState.ANALYSIS_ERROR)
            self.logger.error("Analysis failed for %s: %s", repo_url, exc)
            raise RepositoryAnalysisFailed(
                f"Repository analysis failed: {exc}", cause=exc
            ) from exc
        finally:
            run.enter(AnalysisState.CLEANED_UP)

        self.logger.info(
            "Analysis of %s complete: %d files, %d languages",
            name,
            result.repository.total_files,
            len(result.languages),
        )
        return result

    def analyze_path(self, root: Path | str, name: str | None = None) -> AnalysisResult:
        """Analyze an existing local directory without fetching or cleanup."""
        root_path = Path(root)
        run = _Run(str(root_path), self._on_transition, self.logger)
        try:
            return self._analyze_checkout(root_path, name or root_path.name, run)
        except Exception as exc:
            run.enter(AnalysisState.ANALYSIS_ERROR)
            raise RepositoryAnalysisFailed(
                f"Repository analysis failed: {exc}", cause=exc
            ) from exc

    # ------------------------------------------------------------------
    # Internals

    def _analyze_checkout(self, root: Path, name: str, run: _Run) -> AnalysisResult:
        run.enter(AnalysisState.WALKING)
        files = tuple(self.walker.walk(root, self.max_depth))
        self.logger.debug("Walker discovered %d entries under %s", len(files), root)

        run.enter(AnalysisState.EXTRACTING)
        facets = self._run_extractors(files, root)
        structure = render_structure(name, files)

        fields: Dict[str, Any] = {}
        extras: Dict[str, Any] = {}
        for extractor_name, value in facets.items():
            field_name = _FACET_FIELDS.get(extractor_name)
            if field_name is None:
                extras[extractor_name] = value
            else:
                fields[field_name] = value

        metrics = fields.get("metrics") or CodeMetrics()
        if metrics.total_files != len(files):
            metrics = dataclasses.replace(metrics, total_files=len(files))
        fields["metrics"] = metrics

        result = AnalysisResult(
            repository=RepositoryInfo(
                name=name,
                analyzed_at=self._timestamp(),
                total_files=len(files),
            ),
            structure=structure,
            extras=extras,
            **fields,
        )
        run.enter(AnalysisState.ASSEMBLED)
        return result

    def _run_extractors(self, files: Sequence[FileDescriptor], root: Path) -> Dict[str, Any]:
        if not self.extractors:
            return {}
        workers = self.max_workers or len(self.extractors)
        results: Dict[str, Any] = {}
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="docweave-extract") as pool:
            futures: List[tuple[Extractor, Future]] = [
                (extractor, pool.submit(extractor.extract, files, root))
                for extractor in self.extractors
            ]
            for extractor, future in futures:
                try:
                    results[extractor.name] = future.result()
                except Exception as exc:
                    warning = ExtractionWarning(extractor.name, exc)
                    self.logger.warning("%s; reporting empty %s", warning, extractor.name)
                    results[extractor.name] = extractor.empty()
        return results

    def _timestamp(self) -> str:
        return self._clock().isoformat().replace("+00:00", "Z")


__all__ = ["AnalysisOrchestrator", "AnalysisState"]
