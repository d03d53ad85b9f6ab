"""Error taxonomy for repository analysis."""

from __future__ import annotations


class DocweaveError(RuntimeError):
    """Base class for docweave failures."""


class RepositoryUnavailable(DocweaveError):
    """Raised when a repository cannot be cloned."""

    def __init__(self, repo_url: str, branch: str, detail: str) -> None:
        super().__init__(f"Repository {repo_url} (branch {branch}) is unavailable: {detail}")
        self.repo_url = repo_url
        self.branch = branch
        self.detail = detail


class FetchTimeout(RepositoryUnavailable):
    """Clone exceeded the configured wall-clock timeout."""

    def __init__(self, repo_url: str, branch: str, timeout: float) -> None:
        super().__init__(repo_url, branch, f"clone timed out after {timeout:g}s")
        self.timeout = timeout


class FetchFailed(RepositoryUnavailable):
    """Clone exited non-zero, the remote was unreachable, or the branch is missing."""

    def __init__(self, repo_url: str, branch: str, detail: str, *, stderr: str = "") -> None:
        super().__init__(repo_url, branch, detail)
        self.stderr = stderr


class RepositoryAnalysisFailed(DocweaveError):
    """The only error raised by the public analysis operation."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause

    @property
    def repository_unavailable(self) -> bool:
        """True when the failure is actionable by the user (URL, branch or access)."""
        return isinstance(self.cause, RepositoryUnavailable)


class CleanupFailure(DocweaveError):
    """Scratch directory removal failed. Logged, never surfaced to callers."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Failed to remove scratch directory {path}: {detail}")
        self.path = path


class ExtractionWarning(Warning):
    """A single extractor failed and its facet was degraded to the empty value."""

    def __init__(self, extractor: str, error: BaseException) -> None:
        super().__init__(f"Extractor '{extractor}' failed: {error}")
        self.extractor = extractor
        self.error = error


__all__ = [
    "CleanupFailure",
    "DocweaveError",
    "ExtractionWarning",
    "FetchFailed",
    "FetchTimeout",
    "RepositoryAnalysisFailed",
    "RepositoryUnavailable",
]
